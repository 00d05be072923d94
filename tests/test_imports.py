"""Smoke tests: public modules are importable."""


def test_browser_imports():
    from tabdriver.browser import (
        find_system_chrome,
        launch_cdp_browser,
        build_launch_args,
        fetch_cookies,
        delete_cookies,
        clear_storage,
        export_cookies,
        open_browser,
        open_tab,
        build_stealth_shim,
        install_stealth,
        build_user_agent,
        resolve_user_agent,
    )
    assert callable(find_system_chrome)
    assert callable(launch_cdp_browser)
    assert callable(build_launch_args)
    assert callable(fetch_cookies)
    assert callable(delete_cookies)
    assert callable(clear_storage)
    assert callable(export_cookies)
    assert callable(open_browser)
    assert callable(open_tab)
    assert callable(build_stealth_shim)
    assert callable(install_stealth)
    assert callable(build_user_agent)
    assert callable(resolve_user_agent)


def test_top_level_imports():
    from tabdriver import SessionConfig, SessionError, SessionStep, run_session, __version__
    assert callable(run_session)
    assert SessionStep.LAUNCH.value == "launch"
    assert issubclass(SessionError, Exception)
    assert SessionConfig(new=True).mode == "launch"
    assert __version__


def test_cli_imports():
    from tabdriver.cli import main, parse_config, build_parser
    assert callable(main)
    assert callable(parse_config)
    assert build_parser().prog == "tabdriver"
