import json
import os
import logging
from typing import Dict, Any, Optional

from gymbooking.core.config import settings

logger = logging.getLogger("gymbooking")

DAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

def load_gym_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads gym configuration from JSON file.
    Raises FileNotFoundError if config is missing, ValueError if it is not valid JSON.
    Returns: Dict containing config.
    """
    config_path = path or settings.GYM_CONFIG_PATH
    if not os.path.exists(config_path):
        logger.critical(f"❌ Configuration file '{config_path}' not found! The booking system cannot start.")
        raise FileNotFoundError(f"Configuration file not found at {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = json.load(f)
            logger.info(f"✅ Configuration loaded for: {config.get('gym_name', 'Unknown')}")
            return config
    except json.JSONDecodeError as e:
        logger.critical(f"❌ Invalid JSON in gym configuration: {e}")
        raise ValueError(f"Invalid JSON in config file: {e}")

def get_business_hours(config: Dict[str, Any], day_name: str) -> Optional[Dict[str, int]]:
    """
    Helper to get business hours for a specific day (monday, tuesday...).
    Returns: Dict {'open': 6, 'close': 22} or None if closed.
    """
    hours = config.get("business_hours", {})
    return hours.get(day_name.lower())

def get_admin_emails(config: Dict[str, Any]) -> frozenset:
    return frozenset(email.strip().lower() for email in config.get("admin_emails", []) if email)

def get_trial_keywords(config: Dict[str, Any]) -> tuple:
    return tuple(k.lower() for k in config.get("trial_keywords", ["prueba", "regalo"]))
