"""Output dialects as capability records.

A dialect is plain data: which annotation namespace it imports from and
which return-type shapes it can express. The signature builder and the
emitters query these flags; there is no emitter class hierarchy.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ConfigError


@dataclass(frozen=True)
class Dialect:
    name: str
    annotation_package: str
    supports_async: bool
    supports_raw_response: bool
    async_type: str = "java.util.concurrent.CompletionStage"
    description: str = "A JAX-RS interface. An implementation of this interface must be provided."

    @property
    def raw_response_type(self) -> str:
        return f"{self.annotation_package}.core.Response"

    def annotation(self, simple_name: str) -> str:
        """Fully qualified annotation class, e.g. jakarta.ws.rs.PathParam."""
        return f"{self.annotation_package}.{simple_name}"


JAXRS = Dialect(
    name="jaxrs",
    annotation_package="jakarta.ws.rs",
    supports_async=True,
    supports_raw_response=True,
)

THORNTAIL = Dialect(
    name="thorntail",
    annotation_package="javax.ws.rs",
    supports_async=False,
    supports_raw_response=True,
)

DIALECTS: dict[str, Dialect] = {d.name: d for d in (JAXRS, THORNTAIL)}


def get_dialect(name: str) -> Dialect:
    """Look up a built-in dialect by name."""
    try:
        return DIALECTS[name]
    except KeyError:
        known = ", ".join(sorted(DIALECTS))
        raise ConfigError(f"unknown dialect {name!r} (known: {known})", "dialects") from None
