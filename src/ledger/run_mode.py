from enum import Enum
from typing import Mapping

GATEWAY_FLAG = "GATEWAY_INTERFACE"
EMBEDDED_FLAG = "LEDGER_EMBEDDED"
NO_SESSION_CHECK_FLAG = "LEDGER_NO_SESSION_CHECK"


class RunMode(str, Enum):
    """Execution context of the current request."""
    CLI = "cli"
    GATEWAY = "cgi"
    EMBEDDED = "embedded"

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "RunMode":
        # gateway takes precedence over the embedded flag
        if environ.get(GATEWAY_FLAG):
            return cls.GATEWAY
        if environ.get(EMBEDDED_FLAG):
            return cls.EMBEDDED
        return cls.CLI

    @classmethod
    def parse(cls, name: str) -> "RunMode":
        """Accepts the enum values plus the ``gateway`` alias."""
        name = name.lower()
        if name == "gateway":
            return cls.GATEWAY
        return cls(name)

    @property
    def is_network(self) -> bool:
        return self is not RunMode.CLI


def flag_set(environ: Mapping[str, str], key: str) -> bool:
    return environ.get(key, "").lower() not in ("", "0", "false", "no")
