import zipfile
from io import BytesIO

import pytest


def general_line(patente="3420", pedimento="4001234", seccion="430", fecha_pago="2025-03-14", width=34) -> str:
    fields = [""] * width
    fields[0:5] = [patente, pedimento, seccion, "1", "A1"]
    fields[7] = "ABC010101AB1"
    fields[9:14] = ["17.2500", "120.50", "30", "10", "5.5"]
    fields[15] = "1250.75"
    if width > 30:
        fields[30] = fecha_pago
    return "|".join(fields)


def invoice_line(patente="3420", pedimento="4001234", seccion="430", numero="INV-1", valor="500") -> str:
    fields = [""] * 20
    fields[0:9] = [patente, pedimento, seccion, "2025-03-01", numero, "FOB", "USD", valor, valor]
    fields[12] = "Proveedora Industrial"
    fields[13] = "Av. Reforma 100"
    return "|".join(fields)


def item_line(
    patente="3420",
    pedimento="4001234",
    seccion="430",
    secuencia="1",
    valor="500",
    cantidad="10",
    descripcion="Tornillería de acero",
) -> str:
    fields = [""] * 19
    fields[0:15] = [
        patente,
        pedimento,
        seccion,
        "73181599",
        secuencia,
        "",
        descripcion,
        "50.00",
        "8625",
        valor,
        valor,
        cantidad,
        "6",
        cantidad,
        "6",
    ]
    return "|".join(fields)


def build_zip(entries: dict[str, bytes | None]) -> bytes:
    """Entries mapped to ``None`` become directories."""
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, content in entries.items():
            if content is None:
                archive.writestr(zipfile.ZipInfo(name), b"")
            else:
                archive.writestr(name, content)
    return buffer.getvalue()


def encode(*lines: str) -> bytes:
    return "\r\n".join(lines).encode("cp1252")


@pytest.fixture
def datastage_zip() -> bytes:
    return build_zip(
        {
            "export/": None,
            "export/M3420_501.txt": encode(general_line(), general_line(seccion="431")),
            "export/M3420_505.txt": encode(
                "Patente|Pedimento|Seccion|Fecha|Factura|Term|Moneda|USD|ME|Pais",
                invoice_line(),
                invoice_line(pedimento="9999999"),
            ),
            "export/M3420_551.txt": encode(
                item_line(secuencia="1", valor="500", cantidad="10"),
                "",
                item_line(secuencia="2", valor="250.25", cantidad="3"),
                item_line(seccion="431", secuencia="1", valor="99.75", cantidad="1"),
                item_line(pedimento="9999999", secuencia="1", valor="1000"),
            ),
            "export/M3420_510.txt": encode("3420|4001234|430|6|0|250"),
            "export/leeme.txt": encode("Exportación Data Stage"),
        }
    )
