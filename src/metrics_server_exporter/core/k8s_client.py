import asyncio
import logging
import platform
import typing

from kubernetes_asyncio import client, config

from metrics_server_exporter import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"metrics-server-exporter/{__version__} ({platform.system().lower()}/{platform.machine().lower()})"

# Global lock to prevent race conditions during config loading
_CONFIG_LOCK = asyncio.Lock()
_CONFIG_LOADED = False


async def ensure_k8s_config(in_cluster: bool = True, kubeconfig: typing.Optional[str] = None) -> bool:
    """
    Ensures that the Kubernetes configuration is loaded exactly once.

    In-cluster configuration is tried first unless ``in_cluster`` is False,
    then the local kubeconfig (``kubeconfig`` or the default location).

    Returns:
        bool: True if config was loaded successfully (or was already loaded), False otherwise.
    """
    global _CONFIG_LOADED

    if _CONFIG_LOADED:
        return True

    async with _CONFIG_LOCK:
        if _CONFIG_LOADED:
            return True

        if in_cluster:
            try:
                logger.debug("Attempting to load in-cluster Kubernetes config...")
                config.load_incluster_config()
                logger.info("Loaded in-cluster Kubernetes configuration.")
                _CONFIG_LOADED = True
                return True
            except config.ConfigException:
                logger.debug("In-cluster config not found.")

        try:
            logger.debug("Attempting to load local kubeconfig...")
            await config.load_kube_config(config_file=kubeconfig)
            logger.info("Loaded Kubernetes configuration from kubeconfig file.")
            _CONFIG_LOADED = True
            return True
        except config.ConfigException as e:
            logger.warning("Could not load kubeconfig: %s", e)
        except OSError as e:
            logger.warning("Could not read kubeconfig: %s", e)

    logger.warning("Failed to load any Kubernetes configuration.")
    return False


async def get_api_client(
    in_cluster: bool = True, kubeconfig: typing.Optional[str] = None
) -> typing.Optional[client.ApiClient]:
    """
    Returns an ApiClient tagged with the exporter's user agent, or None when
    no Kubernetes configuration could be loaded.
    """
    if not await ensure_k8s_config(in_cluster=in_cluster, kubeconfig=kubeconfig):
        return None
    api_client = client.ApiClient()
    api_client.user_agent = USER_AGENT
    return api_client
