"""
Reglas de la bitácora: qué tablas se auditan y qué campos cambiaron.

La bitácora no guarda fotografías completas de los registros. Para cada
mutación se comparan los estados anterior y nuevo y sólo se conservan los
campos cuyo valor es distinto. Los campos de metadata (fechas y usuarios de
alta/actualización), los datos sensibles y las relaciones anidadas nunca
forman parte de los fragmentos.
"""

from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict
from sqlalchemy import inspect


class AccionBitacora(str, Enum):
    create = "CREATE"
    update = "UPDATE"
    delete = "DELETE"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalizado = value.strip().upper()
            for miembro in cls:
                if miembro.value == normalizado:
                    return miembro
        return None


#nombres del catálogo ct_bitacora_accion
ACCIONES_BITACORA: dict[AccionBitacora, str] = {
    AccionBitacora.create: "Creación",
    AccionBitacora.update: "Actualización",
    AccionBitacora.delete: "Eliminación",
}

CAMPOS_METADATA = frozenset({"fecha_in", "fecha_up", "id_ct_usuario_in", "id_ct_usuario_up"})

CAMPOS_SENSIBLES = frozenset({
    "password",
    "password_hash",
    "password_salt",
    "contrasena",
    "token",
    "refresh_token",
    "archivo",
    "imagen",
    "pdf",
})

_TIPOS_ESCALARES = (str, int, float, bool, Decimal, datetime, date, time, UUID, Enum)

_AUSENTE = object()


def es_campo_metadata(campo: str) -> bool:
    """True para fechas y usuarios de alta/actualización."""
    return campo in CAMPOS_METADATA or campo.startswith("id_ct_usuario_")


def _es_valor_auditable(valor: Any) -> bool:
    if valor is None or isinstance(valor, _TIPOS_ESCALARES):
        return True
    return isinstance(valor, (list, tuple))


def limpiar_datos(
    registro: Optional[Mapping[str, Any]],
    excluidos: frozenset = CAMPOS_SENSIBLES,
) -> dict[str, Any]:
    """
    Extrae los datos relevantes de un registro para bitácora.

    Excluye campos sensibles, metadata y valores estructurados
    (relaciones expandidas); las listas sí se conservan.

    Args:
        registro: mapeo campo -> valor (puede ser None)
        excluidos: nombres de campos sensibles a descartar

    Returns:
        Nuevo diccionario sólo con campos escalares auditables
    """
    if not registro:
        return {}
    datos = {}
    for campo, valor in registro.items():
        if campo in excluidos or es_campo_metadata(campo):
            continue
        if not _es_valor_auditable(valor):
            continue
        datos[campo] = valor
    return datos


def valores_iguales(a: Any, b: Any) -> bool:
    """Igualdad estructural profunda; un booleano nunca es igual a un número."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    secuencias = (list, tuple)
    if isinstance(a, secuencias) or isinstance(b, secuencias):
        if not (isinstance(a, secuencias) and isinstance(b, secuencias)):
            return False
        return len(a) == len(b) and all(valores_iguales(x, y) for x, y in zip(a, b))
    if isinstance(a, Mapping) or isinstance(b, Mapping):
        if not (isinstance(a, Mapping) and isinstance(b, Mapping)):
            return False
        return a.keys() == b.keys() and all(valores_iguales(a[k], b[k]) for k in a)
    return a == b


def extraer_campos_afectados(
    datos_anteriores: Optional[Mapping[str, Any]],
    datos_nuevos: Optional[Mapping[str, Any]],
    excluidos: frozenset = CAMPOS_SENSIBLES,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Calcula los fragmentos anterior/nuevo con sólo los campos que cambiaron.

    Un campo ausente en uno de los estados se omite de ese fragmento pero
    sí aparece en el otro.

    Args:
        datos_anteriores: estado previo (None o vacío en una creación)
        datos_nuevos: estado posterior
        excluidos: campos sensibles a descartar

    Returns:
        Tupla (campos_anteriores, campos_nuevos)
    """
    anteriores = limpiar_datos(datos_anteriores, excluidos)
    nuevos = limpiar_datos(datos_nuevos, excluidos)

    campos_anteriores: dict[str, Any] = {}
    campos_nuevos: dict[str, Any] = {}

    claves = list(anteriores) + [clave for clave in nuevos if clave not in anteriores]
    for clave in claves:
        valor_anterior = anteriores.get(clave, _AUSENTE)
        valor_nuevo = nuevos.get(clave, _AUSENTE)
        if valor_anterior is not _AUSENTE and valor_nuevo is not _AUSENTE:
            if valores_iguales(valor_anterior, valor_nuevo):
                continue
        if valor_anterior is not _AUSENTE:
            campos_anteriores[clave] = valor_anterior
        if valor_nuevo is not _AUSENTE:
            campos_nuevos[clave] = valor_nuevo

    return campos_anteriores, campos_nuevos


def entity_snapshot(entity: Any) -> dict[str, Any]:
    """
    Fotografía de las columnas escalares de una instancia ORM.

    Los valores se normalizan a tipos JSON (fechas en ISO 8601) para que la
    comparación y la serialización sean independientes de la entidad.
    """
    if entity is None:
        return {}
    mapper = inspect(entity).mapper
    return {
        attr.key: jsonable_encoder(getattr(entity, attr.key))
        for attr in mapper.column_attrs
    }


class TablaAuditable(BaseModel):
    """Configuración de bitácora de una tabla de entidad."""
    model_config = ConfigDict(frozen=True)

    tabla: str
    habilitado: bool = True
    nombre_bitacora: str


class RegistroBitacora:
    """
    Tabla de registro: nombre de tabla -> configuración de bitácora.

    La elegibilidad de una tabla se decide al registrarla y no puede
    cambiarse después; las tablas no registradas no se auditan.
    """

    def __init__(self):
        self._tablas: dict[str, TablaAuditable] = {}

    def registrar(
        self,
        tabla: str,
        habilitado: bool = True,
        nombre_bitacora: Optional[str] = None,
    ) -> TablaAuditable:
        if tabla in self._tablas:
            raise ValueError(f"La tabla '{tabla}' ya está registrada en bitácora")
        entrada = TablaAuditable(
            tabla=tabla,
            habilitado=habilitado,
            nombre_bitacora=nombre_bitacora or tabla,
        )
        self._tablas[tabla] = entrada
        return entrada

    def obtener(self, tabla: str) -> Optional[TablaAuditable]:
        return self._tablas.get(tabla)

    def is_enabled(self, tabla: str) -> bool:
        entrada = self._tablas.get(tabla)
        return entrada is not None and entrada.habilitado

    def nombre_para_bitacora(self, tabla: str) -> str:
        entrada = self._tablas.get(tabla)
        if entrada is None:
            raise KeyError(tabla)
        return entrada.nombre_bitacora

    def tablas(self) -> list[TablaAuditable]:
        return list(self._tablas.values())

    def __contains__(self, tabla: str) -> bool:
        return tabla in self._tablas
