"""
Deferred Expression Resolution
==============================

Operands and data values are expressions of the form

    value (('+' | '-') value)*

where a value is a number, a symbol or '$' (the current output length).
Symbols may be used before they are defined, so an expression's value is
not always known when the compiler reads it.

RefExpression holds one parsed expression. Each value gets a slot; the
compiler receives a setter for every slot and hands it either the value
(when known) or, for a forward reference, to the pending reference list.
Once the whole expression has been read the compiler calls close(). The
completion callback fires exactly once, as soon as the node is closed and
every slot has a value, with the slots combined left to right:

    v0 op1 v1 op2 v2 ...

This lets a single pass emit placeholder bytes and patch them when the
referenced labels turn up later in the source.

Example
-------
>>> results = []
>>> ref = RefExpression(results.append)
>>> ref.set(10)
>>> later = ref.sub()
>>> ref.close()
>>> results
[]
>>> later(3)
>>> results
[7]
"""

from typing import Callable, Optional

SlotSetter = Callable[[int], None]


class RefExpression:
    """
    A deferred arithmetic expression.

    Attributes:
        values: Slot values in source order, None while unresolved
        operators: '+' or '-' between consecutive slots
        closed: True once no more slots will be added
        resolved: True once the callback has fired
    """

    def __init__(self, callback: Callable[[int], None]):
        """
        Args:
            callback: Receives the combined value when it becomes known
        """
        self.values: list[Optional[int]] = []
        self.operators: list[str] = []
        self.closed = False
        self.resolved = False
        self._callback = callback

        # Setter for the leading value
        self.set = self._add_slot()

    def add(self) -> SlotSetter:
        """Append a '+' slot and return its setter."""
        return self._add_slot("+")

    def sub(self) -> SlotSetter:
        """Append a '-' slot and return its setter."""
        return self._add_slot("-")

    def close(self) -> None:
        """Mark the operator chain complete."""
        self.closed = True
        self._try_resolve()

    def _add_slot(self, operator: Optional[str] = None) -> SlotSetter:
        if self.closed:
            raise RuntimeError("cannot add a slot to a closed expression")
        if operator is not None:
            self.operators.append(operator)
        index = len(self.values)
        self.values.append(None)

        def setter(value: int) -> None:
            self.values[index] = value
            self._try_resolve()

        return setter

    def _try_resolve(self) -> None:
        if self.resolved or not self.closed:
            return
        if any(value is None for value in self.values):
            return
        self.resolved = True
        self._callback(self._combine())

    def _combine(self) -> int:
        result = self.values[0]
        for operator, value in zip(self.operators, self.values[1:]):
            if operator == "+":
                result += value
            else:
                result -= value
        return result
