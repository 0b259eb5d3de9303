#!/usr/bin/env python3

# paprikaplate
# Moves a PepperPlate recipe collection into a file Paprika can import.

import argparse
import sys
from getpass import getpass
from pathlib import Path
from typing import Callable, List, Optional

from browser import PageAccessor, SeleniumPageAccessor, start_browser
from configuration import BrowserConfiguration, ConfigurationManager, ScrapingConfiguration
from errors import PaprikaPlateError
from page_logger import PageLogger
from paprika_export import write_recipes
from pepperplate import Authenticator, RecipeEnumerator, RecipeExtractor, download_image


def parse_main_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Export all PepperPlate recipes from a valid account to recipes.yaml for Paprika',
        epilog='Settings are read from PAPRIKAPLATE_* environment variables, '
               'or from the JSON file named by PAPRIKAPLATE_CONFIG.')
    return parser.parse_args(argv)


def ask_for_email() -> str:
    return input('Enter the email address associated with your PepperPlate account: ').strip()


def ask_for_password() -> str:
    return getpass('Enter the password for your PepperPlate account: ')


def migrate(page: PageAccessor, email: str, password: str, config: ScrapingConfiguration,
            fetch_image: Callable[..., bytes] = download_image) -> Path:
    """
    Run the whole migration against an open page.

    Nothing is written unless every recipe was extracted.

    Returns:
        Path of the written recipes file
    """
    Authenticator(page, config.login_url).sign_in(email, password)

    urls = RecipeEnumerator(
        page,
        listing_url=config.listing_url,
        max_clicks=config.max_load_more_clicks,
        max_stalled_loads=config.max_stalled_loads,
        retry_delay=config.click_delay,
    ).enumerate()

    extractor = RecipeExtractor(page, fetch_image=fetch_image, image_timeout=config.image_download_timeout)
    collection = extractor.extract_all(urls)

    return write_recipes(collection, config.output_file)


def main(argv: Optional[List[str]] = None) -> int:
    parse_main_args(argv)

    try:
        config = ConfigurationManager.load()
    except (FileNotFoundError, ValueError) as e:
        print(f'[PP] Configuration error: {e}', file=sys.stderr)
        return 2

    validation_issues = ConfigurationManager.validate_configuration(config)
    if validation_issues:
        print("Configuration validation warnings:")
        for issue in validation_issues:
            print(f"  - {issue}")

    email = ask_for_email()
    password = ask_for_password()

    page = SeleniumPageAccessor(
        start_browser(BrowserConfiguration.from_scraping_config(config)),
        page_logger=PageLogger(config.page_log_file),
        click_delay=config.click_delay,
    )
    try:
        migrate(page, email, password, config)
    except PaprikaPlateError as e:
        print(f'[PP] {e.stage} failed: {e}', file=sys.stderr)
        return 1
    finally:
        page.close()

    return 0


if __name__ == '__main__':
    sys.exit(main())
