from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sqs_listener.domain.models import DEFAULT_CHECK_INTERVAL_SECONDS, Config, Credentials


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    queue_url: str = Field(..., validation_alias="QUEUE_URL")

    aws_region: str = Field("us-east-1", validation_alias="AWS_REGION")
    aws_access_key_id: str = Field("", validation_alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: str = Field("", validation_alias="AWS_SECRET_ACCESS_KEY")
    aws_session_token: str = Field("", validation_alias="AWS_SESSION_TOKEN")
    # Points the client at an SQS-compatible endpoint (e.g. a local emulator).
    sqs_endpoint_url: str = Field("", validation_alias="SQS_ENDPOINT_URL")

    check_interval_seconds: float = Field(
        DEFAULT_CHECK_INTERVAL_SECONDS,
        validation_alias="CHECK_INTERVAL_SECONDS",
    )
    auto_ack: bool = Field(True, validation_alias="AUTO_ACK")
    missing_messages_is_error: bool = Field(True, validation_alias="MISSING_MESSAGES_IS_ERROR")

    def to_config(self) -> Config:
        return Config(
            check_interval_seconds=self.check_interval_seconds,
            auto_ack=self.auto_ack,
            missing_messages_is_error=self.missing_messages_is_error,
        )

    def credentials(self) -> Credentials | None:
        """Explicit credentials when both key id and secret are set, else None (default chain)."""
        if not (self.aws_access_key_id and self.aws_secret_access_key):
            return None
        return Credentials(
            access_key_id=self.aws_access_key_id,
            secret_access_key=self.aws_secret_access_key,
            session_token=self.aws_session_token or None,
        )
