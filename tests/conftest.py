from typing import List

import pytest

from fakes import FakePage


@pytest.fixture
def page() -> FakePage:
    return FakePage()


@pytest.fixture
def recipe_urls() -> List[str]:
    return [f"https://www.pepperplate.com/recipes/view.aspx?id={n}" for n in range(1, 46)]
