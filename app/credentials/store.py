"""
Ordered store of document decryption credentials.

Each user has up to CREDENTIAL_SLOTS slots, addressed by priority 1..N.
Secrets are write-only: they are sealed before storage and only ever
unsealed for the decryptor via ordered_secrets().
"""

from typing import Optional, Sequence

import structlog

from app.config import settings
from app.credentials.cipher import CipherError, SecretCipher
from app.errors import ValidationError
from app.schemas.credentials import CredentialInput, CredentialView
from app.storage.base import CredentialRepository, SealedCredentialInput

logger = structlog.get_logger(__name__)


class CredentialStore:

    def __init__(
        self,
        repository: CredentialRepository,
        cipher: Optional[SecretCipher] = None,
        slots: Optional[int] = None,
    ):
        self.repository = repository
        self.cipher = cipher or SecretCipher()
        self.slots = slots or settings.CREDENTIAL_SLOTS

    def _check_priority(self, priority: int) -> None:
        if not isinstance(priority, int) or not 1 <= priority <= self.slots:
            raise ValidationError(f"invalid priority (must be 1-{self.slots})")

    async def list_all(self, user_id: int) -> list[CredentialView]:
        stored = await self.repository.list_for_user(user_id)
        return [
            CredentialView(
                priority=c.priority,
                label=c.label,
                has_value=bool(c.sealed_secret),
                created_at=c.created_at,
                updated_at=c.updated_at,
            )
            for c in sorted(stored, key=lambda c: c.priority)
        ]

    async def set_one(self, user_id: int, priority: int, secret_value: str, label: str = "") -> None:
        self._check_priority(priority)
        if not secret_value or not secret_value.strip():
            raise ValidationError("password cannot be empty")

        await self.repository.upsert_many(user_id, [
            SealedCredentialInput(priority=priority, sealed_secret=self.cipher.seal(secret_value), label=label),
        ])
        logger.info("credential_saved", user_id=user_id, priority=priority)

    async def set_many(self, user_id: int, inputs: Sequence[CredentialInput]) -> None:
        """
        Upsert several slots as one batch.
        Every element is validated before anything is written. Elements with
        a blank secret are skipped so a form can submit every slot at once.
        """
        seen: set[int] = set()
        for item in inputs:
            self._check_priority(item.priority)
            if item.priority in seen:
                raise ValidationError(f"priority {item.priority} given more than once")
            seen.add(item.priority)

        entries = [
            SealedCredentialInput(
                priority=item.priority,
                sealed_secret=self.cipher.seal(item.secret_value),
                label=item.label,
            )
            for item in sorted(inputs, key=lambda i: i.priority)
            if item.secret_value and item.secret_value.strip()
        ]
        await self.repository.upsert_many(user_id, entries)
        logger.info("credentials_saved", user_id=user_id, priorities=[e.priority for e in entries])

    async def delete_one(self, user_id: int, priority: int) -> None:
        self._check_priority(priority)
        existed = await self.repository.delete(user_id, priority)
        logger.info("credential_deleted", user_id=user_id, priority=priority, existed=existed)

    async def ordered_secrets(self, user_id: int) -> list[tuple[int, str]]:
        """
        Plaintext secrets in ascending priority for the decryptor.
        Empty slots are skipped; a slot that cannot be unsealed is skipped
        with a warning rather than failing the whole batch.
        """
        secrets = []
        for c in sorted(await self.repository.list_for_user(user_id), key=lambda c: c.priority):
            if not c.sealed_secret:
                continue
            try:
                secrets.append((c.priority, self.cipher.unseal(c.sealed_secret)))
            except CipherError as e:
                logger.warning("credential_unseal_failed", user_id=user_id, priority=c.priority, error=str(e))
        return secrets
