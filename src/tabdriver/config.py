"""Session configuration, built once from the command line."""
from dataclasses import dataclass

DEFAULT_DEBUG_PORT = 9222

# Seconds to sleep after the clean-pass reload. The load event alone fires
# before some pages finish re-setting cookies; this is a heuristic.
RELOAD_SETTLE_DELAY = 0.6


@dataclass(frozen=True)
class SessionConfig:
    connect: str | None = None
    new: bool = False
    url: str | None = None
    headful: bool = False
    user_agent: str | None = None
    incognito: bool = False
    stealth: bool = False
    clean: bool = False
    payload: str | None = None
    output: str | None = None
    wait: bool = False
    confirm: bool = False
    verbose: bool = False
    # launch-mode knobs
    chrome_path: str | None = None
    debug_port: int = DEFAULT_DEBUG_PORT
    user_data_dir: str | None = None
    settle_delay: float = RELOAD_SETTLE_DELAY

    def __post_init__(self):
        if bool(self.connect) == self.new:
            raise ValueError("exactly one of connect or new must be set")
        if not self.new:
            launch_only = {
                "headful": self.headful,
                "user_agent": self.user_agent,
                "chrome_path": self.chrome_path,
                "user_data_dir": self.user_data_dir,
            }
            given = [name for name, value in launch_only.items() if value]
            if given:
                raise ValueError(f"{', '.join(given)} requires new")
        if self.settle_delay < 0:
            raise ValueError("settle_delay must not be negative")

    @property
    def mode(self) -> str:
        """``"attach"`` or ``"launch"``."""
        return "launch" if self.new else "attach"

    @property
    def wants_output(self) -> bool:
        return bool(self.output)

    @property
    def wants_payload(self) -> bool:
        return bool(self.payload)

    @property
    def wants_clean(self) -> bool:
        """Storage clearing only runs when cookies are being exported."""
        return self.clean and self.wants_output

    @property
    def wants_incognito_context(self) -> bool:
        """An isolated browsing context is created only when attaching.

        A launched browser gets ``--incognito`` on its command line instead.
        """
        return self.incognito and self.mode == "attach"
