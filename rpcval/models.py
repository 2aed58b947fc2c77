"""Data models: CandidateNode, ValidationOutcome, ValidationReport dataclasses."""

from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass(frozen=True)
class CandidateNode:
    """A node advertised in the gossip snapshot.

    Every field is optional; the snapshot is produced by an external tool
    and individual records are frequently incomplete.  Only ``rpc_host``
    matters downstream.

    Attributes:
        rpc_host: JSON-RPC endpoint as ``host:port``.
        gossip_host: Gossip protocol address as ``host:port``.
        pubkey: Node identity public key (base58).
        shred_version: Cluster shred version the node advertises.
        tpu: Transaction processing unit address.
        version: Reported software version string.
    """

    rpc_host: str | None = None
    gossip_host: str | None = None
    pubkey: str | None = None
    shred_version: int | None = None
    tpu: str | None = None
    version: str | None = None

    @classmethod
    def from_dict(cls, raw: dict) -> "CandidateNode":
        """Build a node from one object of ``solana gossip --output json``.

        Values of an unexpected JSON type are treated as absent rather
        than rejected.
        """
        return cls(
            rpc_host=_str_or_none(raw.get("rpcHost")),
            gossip_host=_str_or_none(raw.get("gossip", raw.get("gossipHost"))),
            pubkey=_str_or_none(raw.get("identityPubkey", raw.get("pubkey"))),
            shred_version=_int_or_none(raw.get("shredVersion")),
            tpu=_str_or_none(raw.get("tpu")),
            version=_str_or_none(raw.get("version")),
        )


@dataclass(frozen=True)
class ValidationOutcome:
    """Verdict of a single probe.

    Attributes:
        address: The probed ``host:port``.
        ok: Whether the endpoint answered the probe successfully.
        error: Human-readable failure reason; ``None`` when *ok*.
    """

    address: str
    ok: bool
    error: str | None = None


@dataclass
class ValidationReport:
    """Summary of one discovery-validate-persist pass.

    Attributes:
        candidate_count: Nodes found in the gossip snapshot.
        rpc_host_count: Nodes that advertised an RPC endpoint.
        outcomes: One outcome per probed address, in input order.
        output_path: Destination of the validated host list.
        written: Whether the host list was persisted this run.
        duration_seconds: Wall-clock duration of the run.
        timestamp: When the run started (UTC).
    """

    candidate_count: int
    rpc_host_count: int
    outcomes: list[ValidationOutcome]
    output_path: str
    written: bool = False
    duration_seconds: float = 0.0
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(UTC),
    )

    @property
    def survivors(self) -> list[str]:
        """Addresses that passed probing, in input order."""
        return [o.address for o in self.outcomes if o.ok]


def _str_or_none(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _int_or_none(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value
