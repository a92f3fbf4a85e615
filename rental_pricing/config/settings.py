from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from rental_pricing.schemas import PenaltySettings, PenaltyType


def find_env_file() -> str:
    env_file = ".env" if Path("/.dockerenv").exists() else ".env.local"

    current_path = Path.cwd()

    for path in [current_path] + list(current_path.parents):
        env_path = path / env_file
        if env_path.exists():
            return str(env_path)

    return env_file


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=find_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    service_name: str = "pricing-core"
    version: str = "1.0.0"
    log_level: str = "INFO"
    log_json: bool = False

    # Penalty defaults used until an admin updates them
    damage_penalty_rate: float = 10  # % of deposit, or absolute amount when fixed
    damage_penalty_type: PenaltyType = PenaltyType.PERCENTAGE
    late_penalty_rate: float = 5  # % of deposit per day, or amount per day when fixed
    late_penalty_type: PenaltyType = PenaltyType.PERCENTAGE
    max_late_penalty_days: int = 7

    def default_penalty_settings(self) -> PenaltySettings:
        return PenaltySettings(
            damage_penalty_rate=self.damage_penalty_rate,
            damage_penalty_type=self.damage_penalty_type,
            late_penalty_rate=self.late_penalty_rate,
            late_penalty_type=self.late_penalty_type,
            max_late_penalty_days=self.max_late_penalty_days,
        )
