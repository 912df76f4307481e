"""
Configuration Loader Module.

This module loads the PrimeNest assistant settings from a configuration
file and exposes them as strongly typed dataclasses:

- ADW: Oracle Autonomous Data Warehouse connection holding the listings.
- OCI_GENAI: Generative AI endpoint, compartment and model identifiers.
- ASSISTANT: Session limits, retry policy and search page size.
- AUTH: JWT secret and allowed CORS origins.

Keeping configuration parsing out of application code makes each piece
easy to test and to override.
"""
import os
from dataclasses import dataclass, field
from configparser import ConfigParser
from typing import List

@dataclass
class ADWConfig:
    """
    Dataclass representing ADW connection configuration.

    Attributes:
        config_dir (str): Directory containing Oracle network configuration files.
        wallet_loc (str): Location of the ADW wallet.
        wallet_pw (str): Password for the ADW wallet.
        dsn (str): Database service name (TNS alias).
        username (str): Database username.
        password (str): Database password.
    """
    config_dir: str
    wallet_loc: str
    wallet_pw: str
    dsn: str
    username: str
    password: str


@dataclass
class GenAIConfig:
    """
    OCI Generative AI settings.

    Attributes:
        oci_config_file (str): Path of the OCI SDK profile file.
        profile (str): Profile name inside the OCI SDK file.
        compartment_id (str): Compartment OCID the models are served from.
        endpoint (str): Inference service endpoint.
        intent_model_id (str): Model used for intent detection.
        response_model_id (str): Model used for reply generation.
        intent_temperature (float): Sampling temperature for intent detection.
        response_temperature (float): Sampling temperature for reply generation.
    """
    oci_config_file: str
    profile: str
    compartment_id: str
    endpoint: str
    intent_model_id: str
    response_model_id: str
    intent_temperature: float = 0.1
    response_temperature: float = 0.7


@dataclass
class AssistantConfig:
    """
    Tunables for the conversational assistant.

    Attributes:
        max_history (int): Turns retained per session.
        session_timeout (float): Idle seconds before a session is swept.
        max_sessions (int): Live sessions kept before the oldest is evicted.
        sweep_interval (float): Seconds between two idle sweeps.
        max_attempts (int): Attempts per upstream LLM call.
        base_delay (float): First backoff delay in seconds.
        page_size (int): Listings returned per search.
    """
    max_history: int = 20
    session_timeout: float = 30 * 60
    max_sessions: int = 1000
    sweep_interval: float = 5 * 60
    max_attempts: int = 3
    base_delay: float = 1.0
    page_size: int = 10


@dataclass
class AuthConfig:
    """JWT verification settings and allowed CORS origins."""
    secret_key: str
    algorithm: str = "HS256"
    allowed_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173"])


@dataclass
class AppConfig:
    """Bundle of every section, handed to the application factory."""
    adw: ADWConfig
    genai: GenAIConfig
    assistant: AssistantConfig
    auth: AuthConfig


def _read(path: str) -> ConfigParser:
    parser = ConfigParser()
    parser.read(path)
    return parser


def load_adw_config(path: str = "config.ini") -> ADWConfig:
    """
    Loads ADW configutration from a file.
    """
    parser = _read(path)

    return ADWConfig(
        config_dir=parser.get("ADW", "config_dir"),
        wallet_loc=parser.get("ADW", "wallet_loc"),
        wallet_pw=parser.get("ADW", "wallet_pw"),
        dsn=parser.get("ADW", "dsn"),
        username=parser.get("ADW", "USERNAME"),
        password=parser.get("ADW", "PASSWORD"),
    )


def load_genai_config(path: str = "config.ini") -> GenAIConfig:
    """
    Loads OCI Generative AI configuration from a file.

    The response model falls back to the intent model when not set.
    """
    parser = _read(path)
    intent_model_id = parser.get("OCI_GENAI", "intent_model_id")

    return GenAIConfig(
        oci_config_file=parser.get("OCI_GENAI", "oci_config_file", fallback="~/.oci/config"),
        profile=parser.get("OCI_GENAI", "profile", fallback="DEFAULT"),
        compartment_id=parser.get("OCI_GENAI", "compartment_id"),
        endpoint=parser.get("OCI_GENAI", "endpoint"),
        intent_model_id=intent_model_id,
        response_model_id=parser.get("OCI_GENAI", "response_model_id", fallback=intent_model_id),
        intent_temperature=parser.getfloat("OCI_GENAI", "intent_temperature", fallback=0.1),
        response_temperature=parser.getfloat("OCI_GENAI", "response_temperature", fallback=0.7),
    )


def load_assistant_config(path: str = "config.ini") -> AssistantConfig:
    """
    Loads assistant tunables; every key is optional.
    """
    parser = _read(path)
    defaults = AssistantConfig()
    section = "ASSISTANT"

    return AssistantConfig(
        max_history=parser.getint(section, "max_history", fallback=defaults.max_history),
        session_timeout=parser.getfloat(section, "session_timeout", fallback=defaults.session_timeout),
        max_sessions=parser.getint(section, "max_sessions", fallback=defaults.max_sessions),
        sweep_interval=parser.getfloat(section, "sweep_interval", fallback=defaults.sweep_interval),
        max_attempts=parser.getint(section, "max_attempts", fallback=defaults.max_attempts),
        base_delay=parser.getfloat(section, "base_delay", fallback=defaults.base_delay),
        page_size=parser.getint(section, "page_size", fallback=defaults.page_size),
    )


def load_auth_config(path: str = "config.ini") -> AuthConfig:
    """
    Loads JWT settings. The secret falls back to the JWT_SECRET_KEY
    environment variable so it can stay out of the file.
    """
    parser = _read(path)
    origins = parser.get("AUTH", "allowed_origins", fallback="http://localhost:5173")

    return AuthConfig(
        secret_key=parser.get("AUTH", "jwt_secret_key", fallback="") or os.environ.get("JWT_SECRET_KEY", ""),
        algorithm=parser.get("AUTH", "algorithm", fallback="HS256"),
        allowed_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
    )


def load_app_config(path: str = "config.ini") -> AppConfig:
    """
    Loads every section at once.
    """
    return AppConfig(
        adw=load_adw_config(path),
        genai=load_genai_config(path),
        assistant=load_assistant_config(path),
        auth=load_auth_config(path),
    )
