"""
Centralized configuration management for PepperPlate scraping.

This module keeps every URL, timeout, bound and path used by a migration run
in one dataclass, and knows how to fill it from a JSON file and from
environment variables.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Dict, List
import json
import os


@dataclass
class ScrapingConfiguration:
    """
    Configuration for a PepperPlate migration run.

    All URLs, timeouts, delays, enumeration bounds and output paths live here.
    """

    # ============ Site ============

    login_url: str = "https://www.pepperplate.com/login.aspx"
    # Empty means: enumerate on whatever page sign-in lands on
    listing_url: str = ""

    # ============ Files ============

    output_file: Path = Path("recipes.yaml")
    page_log_file: str = "log.txt"
    # Empty lets Selenium Manager locate chromedriver
    webdriver_path: str = ""

    # ============ Browser Configuration ============

    headless: bool = True
    window_size: tuple = (1920, 1080)
    page_load_timeout: int = 30
    implicit_wait: float = 0  # Optional elements are probed often, keep this at 0
    user_agent: Optional[str] = None
    disable_images: bool = False
    disable_dev_shm_usage: bool = True  # Helps in Docker/limited memory environments
    disable_gpu: bool = True
    no_sandbox: bool = False

    # Pause after every click so the page can render the result
    click_delay: float = 1.0

    # ============ Enumeration bounds ============

    max_load_more_clicks: int = 500
    max_stalled_loads: int = 3

    # ============ Network ============

    image_download_timeout: int = 30


@dataclass
class BrowserConfiguration:
    """Browser-specific configuration extracted from main config."""

    webdriver_path: str
    headless: bool
    window_size: tuple
    page_load_timeout: int
    implicit_wait: float
    user_agent: Optional[str]
    disable_images: bool
    disable_dev_shm_usage: bool
    disable_gpu: bool
    no_sandbox: bool
    click_delay: float

    @classmethod
    def from_scraping_config(cls, config: ScrapingConfiguration) -> 'BrowserConfiguration':
        """Create browser config from main scraping configuration."""
        return cls(
            webdriver_path=config.webdriver_path,
            headless=config.headless,
            window_size=config.window_size,
            page_load_timeout=config.page_load_timeout,
            implicit_wait=config.implicit_wait,
            user_agent=config.user_agent,
            disable_images=config.disable_images,
            disable_dev_shm_usage=config.disable_dev_shm_usage,
            disable_gpu=config.disable_gpu,
            no_sandbox=config.no_sandbox,
            click_delay=config.click_delay,
        )


class ConfigurationManager:
    """
    Manages loading, validation, and access to configuration settings.

    Values are layered: dataclass defaults, then an optional JSON file named by
    PAPRIKAPLATE_CONFIG, then PAPRIKAPLATE_* environment variables.
    """

    ENV_PREFIX = 'PAPRIKAPLATE_'
    CONFIG_FILE_ENV = 'PAPRIKAPLATE_CONFIG'

    @staticmethod
    def create_default_config() -> ScrapingConfiguration:
        """Create a configuration with all default values."""
        return ScrapingConfiguration()

    @staticmethod
    def load_from_file(filepath: str, config: Optional[ScrapingConfiguration] = None) -> ScrapingConfiguration:
        """
        Load configuration from JSON file.

        Args:
            filepath: Path to JSON configuration file
            config: Configuration to update (defaults are used if None)

        Returns:
            ScrapingConfiguration with loaded values

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is malformed
        """
        if config is None:
            config = ScrapingConfiguration()

        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {filepath}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {e}")

        if not isinstance(config_data, dict):
            raise ValueError(f"Configuration file must contain a JSON object: {filepath}")

        for key, value in config_data.items():
            if not hasattr(config, key):
                print(f"Warning: Unknown configuration key '{key}' ignored")
                continue
            if key == 'output_file' and isinstance(value, str):
                value = Path(value)
            elif key == 'window_size' and isinstance(value, list):
                value = tuple(value)
            setattr(config, key, value)

        return config

    @classmethod
    def load_from_env(cls, config: ScrapingConfiguration, environ: Optional[Dict[str, str]] = None) -> ScrapingConfiguration:
        """
        Update configuration from environment variables.

        Environment variables are prefixed with 'PAPRIKAPLATE_'
        Example: PAPRIKAPLATE_MAX_STALLED_LOADS=5

        Args:
            config: Base configuration to update
            environ: Mapping to read instead of os.environ

        Returns:
            Updated configuration
        """
        if environ is None:
            environ = os.environ

        for f in fields(config):
            env_key = f"{cls.ENV_PREFIX}{f.name.upper()}"
            env_value = environ.get(env_key)
            if env_value is None:
                continue

            current_value = getattr(config, f.name)
            try:
                # Convert environment string to the type of the current value
                if isinstance(current_value, bool):
                    new_value = env_value.lower() in ('true', '1', 'yes', 'on')
                elif isinstance(current_value, int):
                    new_value = int(env_value)
                elif isinstance(current_value, float):
                    new_value = float(env_value)
                elif isinstance(current_value, Path):
                    new_value = Path(env_value)
                elif isinstance(current_value, tuple):
                    new_value = tuple(int(part) for part in env_value.split(','))
                else:
                    new_value = env_value
            except (ValueError, TypeError) as e:
                print(f"Warning: Invalid environment value for {env_key}: {e}")
                continue

            setattr(config, f.name, new_value)

        return config

    @classmethod
    def load(cls, environ: Optional[Dict[str, str]] = None) -> ScrapingConfiguration:
        """Build the run configuration: defaults, then config file, then environment."""
        if environ is None:
            environ = os.environ

        config = cls.create_default_config()
        config_file = environ.get(cls.CONFIG_FILE_ENV)
        if config_file:
            cls.load_from_file(config_file, config)
        return cls.load_from_env(config, environ)

    @staticmethod
    def validate_configuration(config: ScrapingConfiguration) -> List[str]:
        """
        Validate configuration values and return list of issues.

        Args:
            config: Configuration to validate

        Returns:
            List of validation error messages (empty if valid)
        """
        issues = []

        if not config.login_url.startswith(('http://', 'https://')):
            issues.append(f"login_url is not an http(s) URL: {config.login_url}")
        if config.listing_url and not config.listing_url.startswith(('http://', 'https://')):
            issues.append(f"listing_url is not an http(s) URL: {config.listing_url}")

        # Validate timeouts
        if config.page_load_timeout < 5:
            issues.append("page_load_timeout should be at least 5 seconds")
        if config.implicit_wait > 0.5:
            issues.append("implicit_wait should be 0 or very low (<=0.5s) to avoid cumulative delays when probing optional elements")
        if config.click_delay < 0:
            issues.append("click_delay must not be negative")
        if config.image_download_timeout < 1:
            issues.append("image_download_timeout should be at least 1 second")

        # Validate enumeration bounds
        if config.max_load_more_clicks < 1:
            issues.append("max_load_more_clicks must be at least 1")
        if config.max_stalled_loads < 1:
            issues.append("max_stalled_loads must be at least 1")

        # Validate paths
        if config.webdriver_path and not os.path.exists(config.webdriver_path):
            issues.append(f"webdriver_path does not exist: {config.webdriver_path}")
        if not Path(config.output_file).name:
            issues.append("output_file must name a file")

        return issues
