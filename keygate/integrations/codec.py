"""
Secure config codec.

Serializes the managed-key config to JSON and passes it through the
encryption primitive. Decoding never raises: anything that is not a
readable config comes back as a DecodeFailure.
"""
import json
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from keygate.utils.security import DecryptionError, decrypt_string, encrypt_string

logger = logging.getLogger(__name__)


class ManagedKeyConfig(BaseModel):
    """Plaintext form of Integration.config for a managed AI Gateway key."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    api_key: Optional[str] = Field(default=None, alias="apiKey")
    managed_key_id: Optional[str] = Field(default=None, alias="managedKeyId")
    team_id: Optional[str] = Field(default=None, alias="teamId")

    @property
    def is_revocable(self) -> bool:
        """Both ids are needed to address the key at the provider."""
        return bool(self.managed_key_id and self.team_id)


@dataclass(frozen=True)
class DecodeFailure:
    reason: str


class SecureConfigCodec:
    def __init__(
        self,
        encrypt: Callable[[str], str] = encrypt_string,
        decrypt: Callable[[str], str] = decrypt_string,
    ):
        self._encrypt = encrypt
        self._decrypt = decrypt

    def encode(self, config: ManagedKeyConfig) -> str:
        payload = config.model_dump(by_alias=True)
        return self._encrypt(json.dumps(payload, sort_keys=True, separators=(",", ":")))

    def decode(self, ciphertext: Optional[str]) -> Union[ManagedKeyConfig, DecodeFailure]:
        if not ciphertext:
            return DecodeFailure("config is empty")

        try:
            plaintext = self._decrypt(ciphertext)
        except DecryptionError as e:
            logger.error(f"Failed to decrypt integration config: {e}")
            return DecodeFailure("config could not be decrypted")

        try:
            payload = json.loads(plaintext)
        except ValueError:
            return DecodeFailure("config is not valid JSON")

        if not isinstance(payload, dict):
            return DecodeFailure("config is not a JSON object")

        try:
            return ManagedKeyConfig.model_validate(payload)
        except ValidationError:
            return DecodeFailure("config fields have unexpected types")
