"""Shared test fixtures for sheetfactory."""

from __future__ import annotations

import logging
from typing import Any

import pytest
from helpers import make_request, make_sheet


@pytest.fixture(autouse=True)
def _reset_warning_capture():
    """Undo logging.captureWarnings after each test.

    pytest restores warnings.showwarning between tests, which would leave
    logging believing capture is still active and make later calls no-ops.
    """
    yield
    logging.captureWarnings(False)


@pytest.fixture
def q1_request() -> dict[str, Any]:
    """The quarterly report example: one sheet, three columns, two rows."""
    return make_request(
        [
            make_sheet(
                rows=[
                    {"id": 1, "name": "A", "value": 10},
                    {"id": 2, "name": "B", "value": 20},
                ]
            )
        ]
    )


@pytest.fixture
def legacy_request() -> dict[str, Any]:
    """The same kind of request written with the Portuguese field names."""
    return {
        "workbook": {
            "nomeWorkbook": "Relatorio Financeiro",
            "abas": [
                {
                    "nomeAba": "Janeiro",
                    "cabecalho": {
                        "campos": ["id", "nome", "valor"],
                        "estilo": {
                            "alinhamento": {"horizontal": "centro", "vertical": "cima"},
                            "corFundo": {"R": 0, "G": 128, "B": 0},
                            "negrito": True,
                            "bordaTotal": True,
                        },
                    },
                    "dados": [
                        {"id": 1, "nome": "Joao", "valor": 100},
                        {
                            "id": 2,
                            "nome": "Maria",
                            "valor": 200,
                            "estilo": {"italico": True, "bordaBaixo": True},
                        },
                    ],
                }
            ],
        }
    }
