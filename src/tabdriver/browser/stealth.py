"""Anti-detection shim for automated Chromium.

Patches the usual automation tells (navigator.webdriver, the permissions
query inconsistency, an empty plugin list, the WebGL vendor strings). This
is best-effort: a page that fingerprints the patches themselves can still
tell, and may find it easier to.
"""
import json
import logging

from playwright.sync_api import Error as PlaywrightError

from ..errors import SessionError, SessionStep

log = logging.getLogger(__name__)

DEFAULT_PLUGINS = (
    "PDF Viewer",
    "Chrome PDF Viewer",
    "Chromium PDF Viewer",
    "Microsoft Edge PDF Viewer",
    "WebKit built-in PDF",
)


def build_stealth_shim(
    *,
    webgl_vendor: str = "Intel Inc.",
    webgl_renderer: str = "Intel Iris OpenGL Engine",
    plugins: tuple[str, ...] = DEFAULT_PLUGINS,
) -> str:
    """Build the JS shim. WebGL strings and plugin names are parameterized."""
    webgl_vendor_js = json.dumps(webgl_vendor)
    webgl_renderer_js = json.dumps(webgl_renderer)
    plugins_js = json.dumps(list(plugins))
    return f"""
    (() => {{
        // -- navigator.webdriver --
        Object.defineProperty(Navigator.prototype, 'webdriver', {{
            get: () => false, configurable: true,
        }});

        // -- navigator.permissions (headless inconsistency fix) --
        if (navigator.permissions) {{
            const _origQuery = navigator.permissions.query.bind(navigator.permissions);
            navigator.permissions.query = function(desc) {{
                if (desc && desc.name === 'notifications') {{
                    return Promise.resolve({{
                        state: Notification.permission === 'default'
                            ? 'prompt' : Notification.permission,
                        onchange: null,
                    }});
                }}
                return _origQuery(desc);
            }};
        }}

        // -- navigator.plugins (empty in headless) --
        const pluginNames = {plugins_js};
        const fakePlugins = pluginNames.map(function(name) {{
            return {{
                name: name,
                filename: 'internal-pdf-viewer',
                description: 'Portable Document Format',
                length: 1,
            }};
        }});
        fakePlugins.item = function(i) {{ return fakePlugins[i] || null; }};
        fakePlugins.namedItem = function(name) {{
            return fakePlugins.find(function(p) {{ return p.name === name; }}) || null;
        }};
        fakePlugins.refresh = function() {{}};
        Object.defineProperty(navigator, 'plugins', {{
            get: () => fakePlugins, configurable: true,
        }});

        // -- WebGL vendor / renderer --
        const patchWebGL = function(proto) {{
            const _origGetParam = proto.getParameter;
            proto.getParameter = function(param) {{
                if (param === 0x9245) return {webgl_vendor_js};
                if (param === 0x9246) return {webgl_renderer_js};
                return _origGetParam.call(this, param);
            }};
        }};
        if (typeof WebGLRenderingContext !== 'undefined') {{
            patchWebGL(WebGLRenderingContext.prototype);
        }}
        if (typeof WebGL2RenderingContext !== 'undefined') {{
            patchWebGL(WebGL2RenderingContext.prototype);
        }}
    }})();
    """


def install_stealth(cdp, **shim_kwargs) -> str:
    """Register the shim via CDP so it runs BEFORE any page JS.

    Uses ``Page.addScriptToEvaluateOnNewDocument``; the registration lives
    as long as *cdp* stays attached. Returns the script identifier.
    Extra keyword arguments are forwarded to :func:`build_stealth_shim`.
    """
    log.debug("Using stealth mode. (may make detection easier, consider turning it off)")
    try:
        result = cdp.send(
            "Page.addScriptToEvaluateOnNewDocument",
            {"source": build_stealth_shim(**shim_kwargs)},
        )
    except PlaywrightError as e:
        raise SessionError(
            SessionStep.STEALTH, f"Error occurred while enabling stealth mode: {e}"
        ) from e
    log.debug("Stealth shim installed (pre-navigation)")
    return result.get("identifier", "") if isinstance(result, dict) else ""
