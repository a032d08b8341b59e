"""Settings validation result model."""

from pydantic import BaseModel, computed_field


class MissingItem(BaseModel):
    """A configuration key whose referenced entity is missing."""

    key: str
    label: str | None = None
    id: str | None = None


class ValidationResult(BaseModel):
    """Structured diagnosis of a configuration against the live store.

    Produced fresh on each run and never persisted. Warnings and errors
    describe suboptimal or unverifiable states and do not affect validity.
    """

    missing_settings: list[MissingItem] = []
    missing_boards: list[MissingItem] = []
    missing_columns: list[MissingItem] = []
    warnings: list[str] = []
    errors: list[str] = []

    @computed_field
    @property
    def is_valid(self) -> bool:
        return not (self.missing_settings or self.missing_boards or self.missing_columns)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
