from typing import (
    Any,
    Callable,
    Generic,
    NoReturn,
    Optional,
    TypeVar,
    cast,
)

from typing_extensions import Self

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=BaseException)


def assert_never(v: Any) -> NoReturn:
    """For exhaustive variant checks etc"""
    raise TypeError(v)


class Either(Generic[T, E]):
    """Explicit success-or-error value, for callers that prefer branching on the error kind
    over catching exceptions"""

    def __init__(self, t: Optional[T] = None, e: Optional[E] = None):
        self.t = t
        self.e = e

    @classmethod
    def ok(cls, t: T) -> Self:
        return cls(t=t)

    @classmethod
    def error(cls, e: E) -> Self:
        return cls(e=e)

    def is_ok(self) -> bool:
        return self.e is None

    def get_or_raise(self, raiser: Optional[Callable[[E], BaseException]] = None) -> T:
        if self.e is not None:
            if not raiser:
                raise self.e
            else:
                raise raiser(self.e)
        else:
            return cast(T, self.t)

    def chain(self, f: Callable[[T], "Either[U, E]"]) -> "Either[U, E]":
        if self.e is not None:
            return self.error(self.e)  # type: ignore # needs higher python and more magic
        else:
            return f(cast(T, self.t))

    def __repr__(self) -> str:
        if self.e is not None:
            return f"Either.error({self.e!r})"
        return f"Either.ok({self.t!r})"

