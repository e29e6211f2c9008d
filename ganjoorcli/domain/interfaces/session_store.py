"""Interface for the stored credential.

Replaces ambient global storage with an explicit object handed to the client.
The client reads the token before every request and clears it on a 401.
"""

import abc
from typing import Optional

from ganjoorcli.domain.models.common import AuthToken


class SessionStore(abc.ABC):
    """Abstract Base Class holding at most one bearer token."""

    @abc.abstractmethod
    def get_token(self) -> Optional[AuthToken]:
        """Returns the stored token, or None for anonymous browsing."""
        pass

    @abc.abstractmethod
    def set_token(self, token: AuthToken) -> None:
        """Stores a token, replacing any previous one."""
        pass

    @abc.abstractmethod
    def clear_token(self) -> None:
        """Removes the stored token. Clearing an empty store is a no-op."""
        pass
