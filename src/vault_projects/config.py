"""Configuration for VaultProjects."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(env_prefix="VAULT_PROJECTS_")

    vault_path: str = Field(default=".")
    # Front-matter boolean key that marks a note as a project
    project_flag_property: str = Field(default="project")
    # Property written by move_task_to_status
    status_property: str = Field(default="status")
    # Property consulted for the next-due rollup
    due_property: str = Field(default="due")
    watch: bool = Field(default=True)
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)

    @field_validator("project_flag_property", "status_property", "due_property")
    @classmethod
    def _non_empty_key(cls, value: str) -> str:
        """Reject blank property keys."""
        value = value.strip()
        if not value:
            raise ValueError("property key must not be empty")
        return value
