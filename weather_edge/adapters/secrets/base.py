from abc import ABC, abstractmethod


class AbstractSecretProvider(ABC):
	"""Interface for anything that yields a secret string, possibly asynchronously."""

	@abstractmethod
	async def get(self) -> str:
		"""Retrieve the secret value.

		Returns:
			str: The secret (may be empty; callers decide whether that is valid).

		Raises:
			Exception: Any retrieval failure (I/O, permissions, remote errors).
		"""
		...
