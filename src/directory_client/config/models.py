"""Configuration models for the directory client."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


URL_SCHEMES = ('ldap://', 'ldaps://')


def _validate_filter(v: str) -> str:
    v = v.strip()
    if not (v.startswith('(') and v.endswith(')')):
        raise ValueError('Filter must be enclosed in parentheses')
    return v


class TLSSettings(BaseModel):
    """Transport security configuration."""

    model_config = ConfigDict(frozen=True)

    tls: bool = Field(default=False, description="Use TLS from the first byte (LDAPS)")
    start_tls: bool = Field(default=False, description="Upgrade a plaintext connection with StartTLS")
    ca_cert_path: Optional[str] = Field(default=None, description="CA certificate file path")
    cert_path: Optional[str] = Field(default=None, description="Client certificate file path")
    key_path: Optional[str] = Field(default=None, description="Client private key file path")
    skip_verify: bool = Field(default=False, description="Do not validate the server certificate")

    @property
    def enabled(self) -> bool:
        return self.tls or self.start_tls


class UserSearchSettings(BaseModel):
    """Where and how to look up users."""

    model_config = ConfigDict(frozen=True)

    base_dn: str = Field(..., description="Base DN to search users under")
    filter: str = Field(default="(objectClass=*)", description="LDAP filter selecting user entries")
    username_attribute: str = Field(..., description="Attribute holding the username")

    @field_validator('filter')
    @classmethod
    def validate_filter(cls, v):
        """Validate user filter format."""
        return _validate_filter(v)


class GroupSearchSettings(BaseModel):
    """Where and how to look up groups."""

    model_config = ConfigDict(frozen=True)

    group_base_dn: str = Field(..., description="Base DN to search groups under")
    group_filter: str = Field(default="(objectClass=groupOfNames)", description="LDAP filter selecting group entries")
    group_attribute: str = Field(default="member", description="Attribute listing group members")

    @field_validator('group_filter')
    @classmethod
    def validate_group_filter(cls, v):
        """Validate group filter format."""
        return _validate_filter(v)


class DirectorySettings(BaseModel):
    """LDAP/AD connection, bind and search configuration."""

    model_config = ConfigDict(frozen=True)

    urls: List[str] = Field(..., min_length=1, description="LDAP servers, tried in order (host:port)")
    anonymous_mode: bool = Field(default=False, description="Skip the service account bind")
    reader_dn: Optional[str] = Field(default=None, description="Service account DN for binding")
    password: Optional[str] = Field(default=None, description="Service account password")
    tls_config: TLSSettings = Field(default_factory=TLSSettings)
    search_settings: List[UserSearchSettings] = Field(default_factory=list)
    group_search_settings: List[GroupSearchSettings] = Field(default_factory=list)
    size_limit: int = Field(default=0, ge=0, description="Search size limit (0 = no limit)")
    time_limit: int = Field(default=0, ge=0, description="Search time limit in seconds (0 = no limit)")

    @field_validator('urls')
    @classmethod
    def validate_urls(cls, v):
        """Validate server URL format."""
        for url in v:
            address = url
            for scheme in URL_SCHEMES:
                if address.startswith(scheme):
                    address = address[len(scheme):]
            host, _, port = address.partition(':')
            if not host:
                raise ValueError(f'Server URL has no host: {url!r}')
            if port and not port.isdigit():
                raise ValueError(f'Server URL has an invalid port: {url!r}')
        return v

    @model_validator(mode='after')
    def validate_reader(self):
        """A service account is required unless running in anonymous mode."""
        if not self.anonymous_mode and not self.reader_dn:
            raise ValueError('reader_dn is required when anonymous_mode is disabled')
        return self

    @model_validator(mode='after')
    def validate_url_schemes(self):
        """An ldaps:// URL needs implicit TLS; it is never dialled in plaintext."""
        if not self.tls_config.tls:
            for url in self.urls:
                if url.startswith('ldaps://'):
                    raise ValueError(f'Server URL {url!r} requires tls_config.tls to be enabled')
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format"
    )
    file: Optional[str] = Field(default=None, description="Log file path")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Validate logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Level must be one of: {valid_levels}')
        return v.upper()


class Config(BaseModel):
    """Main configuration class."""

    directory: DirectorySettings
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
