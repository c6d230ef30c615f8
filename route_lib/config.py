from dataclasses import dataclass
from enum import Enum


class DuplicatePolicy(Enum):
    REJECT = "reject"  # raise DuplicateLinkError
    UPDATE = "update"  # replace the cost of the existing link


class ImportPolicy(Enum):
    PARTIAL = "partial"  # commit valid rows, report the rest
    ATOMIC = "atomic"    # any invalid row rejects the whole batch


@dataclass(frozen=True)
class EngineConfig:
    """
    Tunables shared by the engines and the topology store.

    max_hop: distance-vector candidates above this cost become unreachable.
    max_rounds: distance-vector round ceiling used by converge().
    max_sweeps: relaxation sweep ceiling of the EIGRP-style engine.
    """
    max_hop: int = 15
    max_rounds: int = 200
    max_sweeps: int = 100
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.REJECT
    import_policy: ImportPolicy = ImportPolicy.PARTIAL

    def __post_init__(self):
        for name in ("max_hop", "max_rounds", "max_sweeps"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if not isinstance(self.duplicate_policy, DuplicatePolicy):
            raise TypeError("duplicate_policy must be an instance of DuplicatePolicy Enum")
        if not isinstance(self.import_policy, ImportPolicy):
            raise TypeError("import_policy must be an instance of ImportPolicy Enum")


DEFAULT_CONFIG = EngineConfig()
