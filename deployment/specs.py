from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Reference:
    """The confirmed address of a module deployed earlier in the same run."""

    module: str


@dataclass(frozen=True)
class Constant:
    """A named value from the run configuration."""

    name: str


Argument = Union[Literal, Reference, Constant]


@dataclass(frozen=True)
class DeploymentSpec:
    module: str
    args: Tuple[Argument, ...] = ()
    contract: Optional[str] = None
    value: Optional[Argument] = None

    def __post_init__(self):
        # accept any sequence of descriptors but keep the spec hashable
        object.__setattr__(self, "args", tuple(self.args))

    @property
    def contract_name(self) -> str:
        return self.contract or self.module

    def references(self) -> Tuple[str, ...]:
        descriptors = self.args if self.value is None else (*self.args, self.value)
        return tuple(arg.module for arg in descriptors if isinstance(arg, Reference))


@dataclass(frozen=True)
class Configuration:
    """Constants supplied before the run starts; read-only for its whole duration."""

    constants: Mapping[str, Any] = field(default_factory=dict)
    name: Optional[str] = None
    chain_id: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "constants", MappingProxyType(dict(self.constants)))

    def __contains__(self, name) -> bool:
        return name in self.constants

    def __getitem__(self, name):
        return self.constants[name]
