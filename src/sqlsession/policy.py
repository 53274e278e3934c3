"""Generated-key retrieval policy keyed by driver identity.

Most drivers accept the generic "return all generated keys" mode.
Drivers listed with KeyRetrieval.COLUMNS reject it and must be given
the session's explicit key-column names instead.
"""

from collections.abc import Mapping

from sqlsession.config.models import KeyRetrieval, SessionConfig


class GeneratedKeyPolicy:
    """Lookup table from driver identity to key-retrieval mode."""

    def __init__(
        self,
        table: Mapping[str, KeyRetrieval | str] | None = None,
        default: KeyRetrieval = KeyRetrieval.GENERIC,
    ) -> None:
        if table is None:
            table = SessionConfig().key_retrieval
        self._table = {name: KeyRetrieval(mode) for name, mode in table.items()}
        self.default = default

    @classmethod
    def from_config(cls, config: SessionConfig) -> "GeneratedKeyPolicy":
        """Build the policy from session configuration."""
        return cls(config.key_retrieval)

    @property
    def table(self) -> dict[str, KeyRetrieval]:
        """Copy of the driver identity -> mode table."""
        return dict(self._table)

    def mode_for(self, driver_name: str) -> KeyRetrieval:
        """Key-retrieval mode for a driver identity."""
        return self._table.get(driver_name, self.default)

    def requires_key_columns(self, driver_name: str) -> bool:
        """Whether the driver needs explicit key-column names."""
        return self.mode_for(driver_name) is KeyRetrieval.COLUMNS

    def __repr__(self) -> str:
        return f"GeneratedKeyPolicy({self._table!r}, default={self.default.value!r})"
