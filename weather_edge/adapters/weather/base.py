from abc import ABC, abstractmethod


class AbstractWeatherClient(ABC):
	"""Interface for clients fetching current weather for a city."""

	@abstractmethod
	async def fetch_current(self, city: str, *, api_key: str) -> bytes:
		"""Fetch the current weather for ``city``.

		Args:
			city: City name, passed through verbatim.
			api_key: Resolved upstream credential.

		Returns:
			bytes: JSON body returned by the provider, unchanged.

		Raises:
			UpstreamAppError: If the provider answers with a non-success status.
		"""
		...

	async def aclose(self) -> None:
		"""Release the underlying HTTP resources."""
		return None
