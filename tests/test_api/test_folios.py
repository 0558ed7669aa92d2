"""
Tests for Folio API endpoints.

Tests cover:
- Consulta de siguiente folio, último folio y existencia de control
- Reinicio y estadísticas (sólo administradores)
"""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from typing import Dict

from database.models import FolioControlORM
from services.folio_service import FolioService


class TestConsultaFolios:
    """Read-only folio endpoints for authenticated users."""

    def test_preview_sin_control(
        self,
        client: TestClient,
        auth_headers_capturista: Dict[str, str]
    ):
        response = client.get(
            "/folios/inv/preview", params={"anio": 2025}, headers=auth_headers_capturista
        )

        assert response.status_code == 200
        assert response.json() == {
            "sistema": "INV",
            "anio": 2025,
            "siguiente_folio": "INV-2025-00000001",
        }

    def test_preview_coincide_con_siguiente_folio(
        self,
        client: TestClient,
        folio_service: FolioService,
        auth_headers_capturista: Dict[str, str]
    ):
        folio_service.generar_folios_batch("INV", 6, 1, anio=2025)

        preview = client.get(
            "/folios/INV/preview", params={"anio": 2025}, headers=auth_headers_capturista
        ).json()["siguiente_folio"]

        assert preview == folio_service.generar_folio("INV", 1, anio=2025) == "INV-2025-00000007"

    def test_ultimo_folio(
        self,
        client: TestClient,
        folio_service: FolioService,
        auth_headers_capturista: Dict[str, str]
    ):
        vacio = client.get(
            "/folios/INV/ultimo", params={"anio": 2025}, headers=auth_headers_capturista
        )
        folio_service.generar_folios_batch("INV", 3, 1, anio=2025)
        response = client.get(
            "/folios/INV/ultimo", params={"anio": 2025}, headers=auth_headers_capturista
        )

        assert vacio.json()["ultimo_folio"] is None
        assert response.json()["ultimo_folio"] == "INV-2025-00000003"

    def test_existe_control(
        self,
        client: TestClient,
        folio_service: FolioService,
        auth_headers_capturista: Dict[str, str]
    ):
        folio_service.generar_folio("INFRA", 1, anio=2025)

        response = client.get(
            "/folios/infra/existe", params={"anio": 2025}, headers=auth_headers_capturista
        )

        assert response.json()["existe"] is True

    def test_sistema_demasiado_largo(
        self,
        client: TestClient,
        auth_headers_capturista: Dict[str, str]
    ):
        response = client.get("/folios/DEMASIADOLARGO/preview", headers=auth_headers_capturista)

        assert response.status_code == 422

    def test_consulta_sin_token(self, client: TestClient):
        response = client.get("/folios/INV/preview")

        assert response.status_code == 401


class TestAdministracionFolios:
    """Reset and statistics are admin-only."""

    def test_reiniciar_folios(
        self,
        client: TestClient,
        db_session: Session,
        folio_service: FolioService,
        admin_usuario,
        auth_headers_admin: Dict[str, str]
    ):
        folio_service.generar_folios_batch("INV", 9, 1, anio=2024)

        response = client.post(
            "/folios/reiniciar", json={"sistema": "inv", "anio": 2024}, headers=auth_headers_admin
        )

        assert response.status_code == 200
        assert response.json() == {"sistema": "INV", "anio": 2024, "reiniciado": True}
        db_session.expire_all()
        control = db_session.query(FolioControlORM).one()
        assert control.ultimo_folio == 0
        assert control.id_ct_usuario_up == admin_usuario.id_ct_usuario
        assert folio_service.generar_folio("INV", 1, anio=2024) == "INV-2024-00000001"

    def test_reiniciar_sin_control(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_admin: Dict[str, str]
    ):
        response = client.post(
            "/folios/reiniciar", json={"sistema": "INV", "anio": 2030}, headers=auth_headers_admin
        )

        assert response.json()["reiniciado"] is False
        assert db_session.query(FolioControlORM).count() == 0

    def test_reiniciar_no_admin(
        self,
        client: TestClient,
        auth_headers_supervisor: Dict[str, str]
    ):
        response = client.post(
            "/folios/reiniciar", json={"sistema": "INV", "anio": 2024}, headers=auth_headers_supervisor
        )

        assert response.status_code == 403

    def test_estadisticas(
        self,
        client: TestClient,
        folio_service: FolioService,
        auth_headers_admin: Dict[str, str]
    ):
        folio_service.generar_folios_batch("INV", 2, 1, anio=2025)

        response = client.get("/folios/estadisticas", headers=auth_headers_admin)

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["ultimo_folio_formateado"] == "INV-2025-00000002"
        assert data[0]["siguiente_folio"] == "INV-2025-00000003"

    def test_estadisticas_no_admin(
        self,
        client: TestClient,
        auth_headers_capturista: Dict[str, str]
    ):
        response = client.get("/folios/estadisticas", headers=auth_headers_capturista)

        assert response.status_code == 403
