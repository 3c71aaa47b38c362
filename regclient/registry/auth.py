"""
Registry credential records

These are configuration values only; the client never attaches them on its
own. Pass ``AuthConfig.authorization_header()`` through the ``headers``
argument of a request to authenticate it.
"""

import base64
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class AuthConfig(BaseModel):
    """Authorization information for connecting to a registry"""

    model_config = ConfigDict(populate_by_name=True)

    username: str = ""
    password: str = ""
    auth: str = ""
    email: str = ""
    server_address: str = Field(default="", alias="serveraddress")

    def credential(self) -> str:
        """Base64 ``username:password``, preferring the stored ``auth`` value"""
        if self.auth:
            return self.auth
        raw = f"{self.username}:{self.password}".encode()
        return base64.b64encode(raw).decode()

    def authorization_header(self) -> Dict[str, str]:
        return {"Authorization": f"Basic {self.credential()}"}


AuthConfigs = Dict[str, AuthConfig]

_auth_configs_adapter = TypeAdapter(AuthConfigs)


def load_auth_configs(data: Dict[str, Any]) -> AuthConfigs:
    """
    Validate a server-address -> credentials mapping

    Args:
        data: e.g. the "auths" section of a docker config.json

    Raises:
        pydantic.ValidationError: If an entry is not a credential record
    """
    return _auth_configs_adapter.validate_python(data)
