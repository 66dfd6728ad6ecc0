"""Configuration module for the autofill agent."""

import copy
import os
import json
import logging
from typing import Dict, Any, Optional

from autofill_agent.core.action_executor import FillTimings
from autofill_agent.tools import constants
from autofill_agent.tools.field_identifier import ScoringWeights

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.autofill_agent/config.json"


class Config:
    """
    Configuration manager for the autofill agent.
    """

    # Default configuration values
    DEFAULTS = {
        "scoring": {
            "keyword_weight": constants.KEYWORD_WEIGHT,
            "pattern_weight": constants.PATTERN_WEIGHT,
            "context_weight": constants.CONTEXT_WEIGHT,
            "type_weight": constants.TYPE_WEIGHT,
            "confidence_threshold": constants.DEFAULT_CONFIDENCE_THRESHOLD
        },
        "timing": {
            "focus_delay": constants.FOCUS_DELAY,
            "token_input_delay": constants.TOKEN_INPUT_DELAY,
            "token_commit_delay": constants.TOKEN_COMMIT_DELAY,
            "post_upload_delay": constants.POST_UPLOAD_DELAY,
            "upload_retry_delay": constants.RETRY_DELAY_BASE,
            "upload_attempts": constants.UPLOAD_ATTEMPTS,
            "max_tokens": constants.MAX_TAG_TOKENS,
            "collect_attempts": constants.COLLECT_ATTEMPTS,
            "collect_retry_delay": constants.COLLECT_RETRY_DELAY,
            "watch_interval": constants.WATCH_INTERVAL,
            "watch_settle_delay": constants.WATCH_SETTLE_DELAY
        },
        "select": {
            "fuzzy_threshold": None
        },
        "browser": {
            "headless": True,
            "timeout": 30000,
            "navigation_timeout": 60000
        },
        "profiles": {
            "default_profile": "~/.autofill_agent/profile.json"
        },
        "logging": {
            "level": "INFO",
            "log_file": "autofill.log",
            "console_output": True
        },
        "storage": {
            "results_dir": "~/.autofill_agent/results"
        }
    }

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to configuration file. If None, uses default location.
        """
        self.config_path = os.path.expanduser(config_path or DEFAULT_CONFIG_PATH)
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration from file or create default.

        Returns:
            Dictionary with configuration
        """
        if not os.path.exists(self.config_path):
            logger.warning(f"Configuration file not found at {self.config_path}. Creating default configuration.")
            try:
                os.makedirs(os.path.dirname(self.config_path) or ".", exist_ok=True)
                with open(self.config_path, 'w', encoding='utf-8') as f:
                    json.dump(self.DEFAULTS, f, indent=2)
            except OSError as e:
                logger.error(f"Could not write default configuration: {e}")
            return copy.deepcopy(self.DEFAULTS)

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading configuration from {self.config_path}: {e}")
            return copy.deepcopy(self.DEFAULTS)

        logger.info(f"Loaded configuration from {self.config_path}")
        return self._merge_with_defaults(config)

    def _merge_with_defaults(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Merge user configuration over the defaults."""
        merged = copy.deepcopy(self.DEFAULTS)

        def deep_merge(target, source):
            for key, value in source.items():
                if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                    deep_merge(target[key], value)
                else:
                    target[key] = value

        deep_merge(merged, config)
        return merged

    def save(self) -> bool:
        """
        Save configuration to file.

        Returns:
            True if successful, False otherwise
        """
        try:
            os.makedirs(os.path.dirname(self.config_path) or ".", exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=2)
        except OSError as e:
            logger.error(f"Error saving configuration: {e}")
            return False
        logger.info(f"Saved configuration to {self.config_path}")
        return True

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key (dotted notation, e.g. 'scoring.keyword_weight')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self.config
        for part in key.split('.'):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> bool:
        """
        Set a configuration value and persist it.

        Args:
            key: Configuration key (dotted notation)
            value: Value to set

        Returns:
            True if saved, False otherwise
        """
        parts = key.split('.')
        config = self.config
        for part in parts[:-1]:
            config = config.setdefault(part, {})
        config[parts[-1]] = value
        return self.save()

    def configure_logging(self, level: Optional[str] = None):
        """Configure logging based on configuration."""
        log_level = getattr(logging, (level or self.get('logging.level', 'INFO')).upper(), logging.INFO)
        log_file = self.get('logging.log_file')
        console_output = self.get('logging.console_output', True)

        handlers = []
        if log_file:
            handlers.append(logging.FileHandler(os.path.expanduser(log_file)))
        if console_output:
            handlers.append(logging.StreamHandler())

        logging.basicConfig(
            level=log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=handlers or None,
            force=True
        )

    def get_scoring_weights(self) -> ScoringWeights:
        return ScoringWeights(
            keyword=self.get('scoring.keyword_weight', constants.KEYWORD_WEIGHT),
            pattern=self.get('scoring.pattern_weight', constants.PATTERN_WEIGHT),
            context=self.get('scoring.context_weight', constants.CONTEXT_WEIGHT),
            type=self.get('scoring.type_weight', constants.TYPE_WEIGHT),
        )

    def get_fill_timings(self) -> FillTimings:
        return FillTimings(
            focus_delay=self.get('timing.focus_delay', constants.FOCUS_DELAY),
            token_input_delay=self.get('timing.token_input_delay', constants.TOKEN_INPUT_DELAY),
            token_commit_delay=self.get('timing.token_commit_delay', constants.TOKEN_COMMIT_DELAY),
            post_upload_delay=self.get('timing.post_upload_delay', constants.POST_UPLOAD_DELAY),
            upload_retry_delay=self.get('timing.upload_retry_delay', constants.RETRY_DELAY_BASE),
            upload_attempts=self.get('timing.upload_attempts', constants.UPLOAD_ATTEMPTS),
            max_tokens=self.get('timing.max_tokens', constants.MAX_TAG_TOKENS),
            collect_attempts=self.get('timing.collect_attempts', constants.COLLECT_ATTEMPTS),
            collect_retry_delay=self.get('timing.collect_retry_delay', constants.COLLECT_RETRY_DELAY),
        )

    def get_browser_options(self) -> Dict[str, Any]:
        """
        Get browser configuration options.

        Returns:
            Dictionary with browser options
        """
        return {
            'headless': self.get('browser.headless', True),
            'timeout': self.get('browser.timeout', 30000),
            'navigation_timeout': self.get('browser.navigation_timeout', 60000)
        }

    def get_storage_path(self, storage_type: str) -> str:
        """
        Get a storage path with user expansion.

        Args:
            storage_type: Type of storage (results)

        Returns:
            Expanded path
        """
        path = self.get(f'storage.{storage_type}_dir')
        return os.path.expanduser(path or f"~/.autofill_agent/{storage_type}")
