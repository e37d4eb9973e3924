from datetime import date

import pytest

TODAY = date(2024, 1, 1)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def client(tmp_path):
    from app import app

    app.config["TESTING"] = True
    app.config["PDF_PATH"] = str(tmp_path / "report.pdf")
    with app.test_client() as c:
        yield c
