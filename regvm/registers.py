"""
regvm — Register Store

A fixed set of named integer registers, all zero after reset.  Names are
case-sensitive and decided when the store is built; lookups outside that
set raise UnknownRegisterError instead of inventing a new register.
"""

from typing import Dict, Iterator, Optional, Sequence

from .config import DEFAULT_REGISTERS
from .errors import UnknownRegisterError


class RegisterFile:
    """Named register set (R1, R2, R3 by default)."""

    __slots__ = ('_names', '_values')

    def __init__(self, names: Sequence[str] = DEFAULT_REGISTERS):
        self._names = tuple(names)
        self._values: Dict[str, int] = {}
        self.reset()

    @property
    def names(self):
        return self._names

    def reset(self):
        """Zero every register, discarding prior values."""
        self._values = {name: 0 for name in self._names}

    def check(self, name: str) -> str:
        if name not in self._values:
            raise UnknownRegisterError(name, known=self._names)
        return name

    def get(self, name: str) -> int:
        self.check(name)
        return self._values[name]

    def set(self, name: str, value: int):
        self.check(name)
        self._values[name] = value

    def __contains__(self, name) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __getitem__(self, name: str) -> int:
        return self.get(name)

    def snapshot(self) -> Dict[str, int]:
        return dict(self._values)

    def display(self, width: Optional[int] = None) -> str:
        """One register per line, names left-aligned: 'R1 = 15'."""
        if width is None:
            width = max(len(n) for n in self._names)
        return "\n".join(f"{name:<{width}} = {self._values[name]}" for name in self._names)

    def __repr__(self):
        regs = " ".join(f"{n}={v}" for n, v in self._values.items())
        return f"RegisterFile({regs})"
