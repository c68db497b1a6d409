"""Environment-based configuration for the Elasticsearch connection."""

from pydantic_settings import BaseSettings

from operator_elasticsearch.es_client import DEFAULT_TIMEOUT_SECONDS


class ElasticsearchConfig(BaseSettings):
    """Elasticsearch cluster connection configuration.

    All settings can be overridden via environment variables with
    ES_OPERATOR_ prefix. For example:
        ES_OPERATOR_HOST=es-master-0.prod
        ES_OPERATOR_TIMEOUT_SECONDS=30
    """

    # Cluster address
    host: str = "localhost"
    port: int = 9200  # 0 omits the port from the URL
    secure: bool = False
    path: str = ""  # URL prefix when the cluster sits behind a proxy

    # Per-request timeout; requests are never retried
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    model_config = {"env_prefix": "ES_OPERATOR_"}

    @property
    def base_url(self) -> str:
        scheme = "https" if self.secure else "http"
        netloc = f"{self.host}:{self.port}" if self.port > 0 else self.host
        prefix = self.path.strip("/")
        return f"{scheme}://{netloc}/{prefix}" if prefix else f"{scheme}://{netloc}"
