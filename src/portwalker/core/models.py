from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterator, List

from .errors import ConfigurationError

USER_SECRET_PREFIX = "User secret: "
USER_LEVEL_PREFIX  = "User level: "
NOT_READY_SENTINEL = "Really don't feel like working today huh..."

SOLUTION_POINTS   = 100
SOLUTION_PROTOCOL = "MD5"
SOLUTION_KEY      = (
    "Pasting code from the Internet into production code "
    "is like chewing gum found in the street."
)


class Phase(Enum):
    INIT             = auto()
    AWAITING_SECRET  = auto()
    HAVE_SECRET      = auto()
    AWAITING_LEVEL   = auto()
    HAVE_LEVEL       = auto()
    INFORMATIONAL    = auto()
    SUBMITTING       = auto()
    DONE             = auto()
    ABORTED          = auto()


class Write(Enum):
    """What, if anything, gets POSTed to an endpoint."""

    NONE         = auto()
    USER         = auto()
    USER_SECRET  = auto()
    POLL_SECRET  = auto()
    LEVEL        = auto()
    SUBMIT       = auto()


class Status(Enum):
    OK                = "ok"
    TRANSPORT_FAILURE = "transport-failure"
    PARSE_FAILURE     = "parse-failure"
    NOT_READY         = "not-ready"


@dataclass(frozen=True)
class PortRange:
    host: str
    start: int
    end: int
    timeout: float                 # seconds

    def __post_init__(self) -> None:
        for port in (self.start, self.end):
            if not 1 <= port <= 65535:
                raise ConfigurationError(f"port {port} outside 1-65535")
        if self.start > self.end:
            raise ConfigurationError(
                f"start port {self.start} is greater than end port {self.end}"
            )
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

    def ports(self) -> Iterator[int]:
        return iter(range(self.start, self.end + 1))

    def __len__(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class Endpoint:
    path: str
    read: bool = False
    write: Write = Write.NONE


# Order matters: the secret must be known before the level, the level before
# the submission.
ENDPOINTS: tuple[Endpoint, ...] = (
    Endpoint("/ping",           read=True),
    Endpoint("/signup",         read=True, write=Write.USER),
    Endpoint("/check",          read=True, write=Write.USER),
    Endpoint("/getUserSecret",  write=Write.POLL_SECRET),
    Endpoint("/getUserLevel",   write=Write.LEVEL),
    Endpoint("/getUserPoints",  write=Write.USER_SECRET),
    Endpoint("/iNeedAHint",     write=Write.USER_SECRET),
    Endpoint("/enterChallenge", write=Write.USER_SECRET),
    Endpoint("/submitSolution", write=Write.SUBMIT),
)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 0          # 0 -> keep polling forever
    backoff: float = 0.0           # seconds between attempts

    def allows(self, attempt: int) -> bool:
        """True if request number `attempt` (1-based) may be sent."""
        return self.max_attempts == 0 or attempt <= self.max_attempts


@dataclass
class Session:
    user: str
    secret: str | None = None
    level: int | None = None

    def body(self, with_secret: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {"User": self.user}
        if with_secret and self.secret:
            data["Secret"] = self.secret
        return data


@dataclass(frozen=True)
class Response:
    status: str                    # "200 OK"
    status_code: int
    headers: Dict[str, str]
    body: str


@dataclass
class StepOutcome:
    path: str
    status: Status
    body: str = ""
    error: str | None = None
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return self.status is Status.OK


@dataclass
class PortReport:
    port: int
    session: Session
    phase: Phase = Phase.INIT
    outcomes: List[StepOutcome] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        return self.phase is Phase.DONE

    @property
    def result(self) -> str | None:
        """Body of /submitSolution, if the walk got that far."""
        if self.completed and self.outcomes:
            return self.outcomes[-1].body
        return None

    @property
    def failure(self) -> StepOutcome | None:
        for outcome in self.outcomes:
            if not outcome.ok:
                return outcome
        return None


def build_submission(session: Session) -> Dict[str, Any]:
    if session.secret is None or session.level is None:
        raise ValueError("submission needs both secret and level")
    return {
        "User": session.user,
        "Secret": session.secret,
        "Content": {
            "Level": session.level,
            "Challenge": {
                "Username": session.user,
                "Secret": session.secret,
                "Points": SOLUTION_POINTS,
            },
            "Protocol": SOLUTION_PROTOCOL,
            "SecretKey": SOLUTION_KEY,
        },
    }
