"""Configuration API endpoints"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ValidationError

from ..services.config_manager import ConfigManager, EditingSettings
from ..services.script_store import HiseScriptStore

logger = logging.getLogger(__name__)

router = APIRouter()


class ConfigUpdateRequest(BaseModel):
    """Request to update configuration"""

    hise: dict | None = None
    editing: dict | None = None
    server: dict | None = None


class ConfigResponse(BaseModel):
    """Configuration response"""

    hise: dict
    editing: dict
    server: dict


@router.get("", response_model=ConfigResponse)
async def get_config() -> ConfigResponse:
    """Get current configuration"""
    config = ConfigManager.get_instance().get_config()
    return ConfigResponse(
        hise=config.get("hise", {}),
        editing=config.get("editing", {}),
        server=config.get("server", {}),
    )


@router.put("")
async def update_config(request: ConfigUpdateRequest, http_request: Request) -> dict[str, Any]:
    """Update configuration"""
    updates = request.model_dump(exclude_none=True)

    if "editing" in updates:
        try:
            EditingSettings.from_config(updates)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=f"Invalid editing settings: {e}")

    if "hise" in updates:
        try:
            HiseScriptStore.from_config(updates)
        except (AttributeError, TypeError, ValueError) as e:
            raise HTTPException(status_code=400, detail=f"Invalid HISE settings: {e}")

    config_manager = ConfigManager.get_instance()
    config_manager.save_config(updates)

    # Changes apply to the running editor right away
    editor = getattr(http_request.app.state, "script_editor", None)
    if editor is not None:
        editor.apply_settings(config_manager.get_editing_settings())
        if "hise" in updates:
            store = HiseScriptStore.from_config(config_manager.get_config())
            editor.use_store(store)
            logger.info("[Config] HISE connection now %s", store.base_url)

    return {"status": "success", "message": "Configuration updated"}
