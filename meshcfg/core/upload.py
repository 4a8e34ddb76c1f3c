"""Upload of an assembled configuration to the mesh manager server."""

from __future__ import annotations

import logging

import requests

from meshcfg.core.errors import UploadError
from meshcfg.core.model import DeviceConfig
from meshcfg.core.report import config_to_dict

UPLOAD_TIMEOUT_S = 10.0
LOGGER = logging.getLogger(__name__)


def upload_config(
    config: DeviceConfig,
    *,
    admin_url: str,
    api_key: str,
    mesh_id: str,
    session: requests.Session | None = None,
) -> bool:
    """POST the config to `{admin_url}/api/meshes/{mesh_id}/nodes/import`.

    Returns False without contacting the server when the API key or mesh id is
    missing. Raises UploadError on network failure or a status other than 200 or 201.
    """
    if not api_key or not mesh_id:
        return False

    url = f"{admin_url.rstrip('/')}/api/meshes/{mesh_id}/nodes/import"
    post = session.post if session is not None else requests.post
    try:
        response = post(
            url,
            json=config_to_dict(config),
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=UPLOAD_TIMEOUT_S,
        )
    except requests.RequestException as exc:
        raise UploadError(f"Failed to upload configuration to {url}: {exc}") from exc

    if response.status_code not in (200, 201):
        raise UploadError(f"Upload to {url} failed with status {response.status_code}")
    LOGGER.info("Uploaded configuration for node %s to mesh %s", config.node_number, mesh_id)
    return True
