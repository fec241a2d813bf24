"""
CSV Mapping.

Fixed column layouts for exchanging clients, products, projects and
transactions as CSV (and as an XLSX workbook with the same layout).

Import is lenient: the header line is skipped, rows shorter than the
minimum column count are skipped, unparsable numbers become 0 and
unparsable dates become today. Unset project costs travel as empty cells. Every
imported row goes through the record store's normal add path, so ids,
project numbers, cycle checks and lifecycle effects apply as usual.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence
import csv
import io
import logging

from domain.catalog.entities import Product
from domain.client.entities import Client
from domain.finance.entities import Transaction
from domain.project.entities import Project
from domain.shared.base_entity import to_date, to_decimal
from domain.shared.value_objects import (
    ClientType,
    ProductType,
    ProjectStatus,
    ProjectType,
    TransactionType,
    coerce_enum,
)

from .record_store import LedgerRecordStore
from .settings import ledger_setting

logger = logging.getLogger(__name__)


CSV_MAPPING_VERSION = 1

CLIENT_COLUMNS = [
    'kind', 'name', 'address', 'person_type', 'phone', 'mobile',
    'zip_code', 'city', 'email', 'tax_id', 'state_registration', 'neighborhood',
    'complement', 'street_number', 'tax_exempt', 'legal_name', 'company_id', 'active',
]

PRODUCT_COLUMNS = [
    'id', 'name', 'description', 'category', 'type', 'unit',
    'cost_price', 'sale_price', 'current_stock', 'min_stock', 'components',
]

PROJECT_COLUMNS = [
    'number', 'client', 'title', 'description', 'status', 'type', 'budget',
    'start_date', 'end_date', 'materials_cost', 'labor_cost', 'profit_margin',
]

TRANSACTION_COLUMNS = ['type', 'category', 'description', 'amount', 'date', 'project']

DEFAULT_PROFIT_MARGIN = Decimal('20')


# =============================================================================
# FIELD HELPERS
# =============================================================================

def _text(value: Any) -> str:
    if value is None:
        return ''
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    if hasattr(value, 'value'):
        return str(value.value)
    return str(value)


def _flag(value: bool) -> str:
    return 'true' if value else 'false'


def _at(values: Sequence[str], index: int) -> str:
    return values[index] if index < len(values) else ''


def _optional(values: Sequence[str], index: int) -> Optional[str]:
    return _at(values, index) or None


def _number(values: Sequence[str], index: int) -> Decimal:
    return to_decimal(_at(values, index))


def _date(values: Sequence[str], index: int, default: date) -> date:
    """ISO date from the column, or ``default`` when it is empty or unparsable."""
    text = _at(values, index)
    try:
        return to_date(text) or default
    except ValueError:
        logger.debug(f"Unparsable date '{text}' in column {index}, using {default}")
        return default


# =============================================================================
# ROW MAPPINGS
# =============================================================================

def client_to_row(client: Client) -> List[str]:
    return [
        'Client',
        client.name,
        client.address.street_line,
        'J' if client.is_organization else 'F',
        client.phone,
        client.mobile,
        client.address.zip_code,
        client.address.city,
        client.email,
        _text(client.tax_id),
        _text(client.state_registration),
        client.address.neighborhood,
        _text(client.address_complement),
        _text(client.street_number),
        _flag(client.tax_exempt),
        _text(client.legal_name),
        _text(client.company_id),
        _flag(client.active),
    ]


def client_from_row(values: Sequence[str], store: LedgerRecordStore) -> Optional[Dict[str, Any]]:
    is_organization = _at(values, 3) == 'J'
    return {
        'name': _at(values, 1),
        'type': ClientType.ORGANIZATION if is_organization else ClientType.INDIVIDUAL,
        'person_tax_id': None if is_organization else _optional(values, 9),
        'company_tax_id': _optional(values, 9) if is_organization else None,
        'email': _at(values, 8),
        'phone': _at(values, 4),
        'mobile': _at(values, 5),
        'legal_name': _optional(values, 15),
        'state_registration': _optional(values, 10),
        'tax_exempt': _at(values, 14) == 'true',
        'street_number': _optional(values, 13),
        'address_complement': _optional(values, 12),
        'company_id': _optional(values, 16),
        'active': _at(values, 17) != 'false',
        'address': {
            'country': ledger_setting('LEDGER_DEFAULT_COUNTRY', 'Brasil'),
            'state': '',
            'city': _at(values, 7),
            'zip_code': _at(values, 6),
            'neighborhood': _at(values, 11),
            'street_type': '',
            'street': _at(values, 2),
        },
        'total_projects': 0,
        'total_value': 0,
    }


def _components_text(product: Product) -> str:
    return ';'.join(f"{c.product_name}:{c.quantity}" for c in product.components)


def _parse_components(text: str) -> List[tuple]:
    """Parse ``name:quantity;name:quantity`` into (name, quantity) pairs."""
    pairs = []
    for chunk in text.split(';'):
        if not chunk.strip():
            continue
        name, _, quantity = chunk.rpartition(':')
        if not name:
            name, quantity = quantity, ''
        pairs.append((name.strip(), to_decimal(quantity, default=Decimal('1'))))
    return pairs


def product_to_row(product: Product) -> List[str]:
    return [
        product.id,
        product.name,
        product.description,
        product.category,
        product.type.value,
        product.unit,
        _text(product.cost_price),
        _text(product.sale_price or 0),
        _text(product.current_stock),
        _text(product.min_stock),
        _components_text(product),
    ]


def product_from_row(values: Sequence[str], store: LedgerRecordStore) -> Optional[Dict[str, Any]]:
    sale_price = _number(values, 7)
    return {
        'name': _at(values, 1),
        'description': _at(values, 2),
        'category': _at(values, 3),
        'type': coerce_enum(ProductType, _at(values, 4), ProductType.RAW_MATERIAL),
        'unit': _at(values, 5) or 'UN',
        'cost_price': _number(values, 6),
        'sale_price': sale_price or None,
        'current_stock': _number(values, 8),
        'min_stock': _number(values, 9),
        'components': [],
    }


def project_to_row(project: Project) -> List[str]:
    return [
        str(project.number),
        _text(project.client_name),
        project.title,
        project.description,
        project.status.value,
        project.type.value,
        _text(project.budget),
        _text(project.start_date),
        _text(project.end_date),
        _text(project.materials_cost),
        _text(project.labor_cost),
        _text(project.profit_margin or 0),
    ]


def project_from_row(values: Sequence[str], store: LedgerRecordStore) -> Optional[Dict[str, Any]]:
    client = store.find_client_by_name(_at(values, 1))
    if client is None:
        logger.debug(f"Skipping project row for unknown client '{_at(values, 1)}'")
        return None

    today = store.today()
    return {
        'client_id': client.id,
        'client_name': _at(values, 1),
        'title': _at(values, 2),
        'description': _at(values, 3),
        'status': coerce_enum(ProjectStatus, _at(values, 4), ProjectStatus.QUOTE),
        'type': coerce_enum(ProjectType, _at(values, 5), ProjectType.QUOTE),
        'products': [],
        'budget': _number(values, 6),
        'start_date': _date(values, 7, today),
        'end_date': _date(values, 8, today),
        'materials_cost': to_decimal(_at(values, 9), default=None),
        'labor_cost': to_decimal(_at(values, 10), default=None),
        'profit_margin': to_decimal(_at(values, 11), default=DEFAULT_PROFIT_MARGIN),
    }


def transaction_to_row(transaction: Transaction) -> List[str]:
    return [
        transaction.type.value,
        transaction.category,
        transaction.description,
        _text(transaction.amount),
        _text(transaction.date),
        _text(transaction.project_title),
    ]


def transaction_from_row(values: Sequence[str], store: LedgerRecordStore) -> Optional[Dict[str, Any]]:
    return {
        'type': coerce_enum(TransactionType, _at(values, 0), TransactionType.INFLOW),
        'category': _at(values, 1),
        'description': _at(values, 2),
        'amount': _number(values, 3),
        'date': _date(values, 4, store.today()),
        'project_title': _optional(values, 5),
    }


@dataclass(frozen=True)
class CsvMapping:
    """Column layout of one entity type."""

    entity: str
    filename: str
    columns: List[str]
    min_columns: int
    records: Callable[[LedgerRecordStore], List[Any]]
    to_row: Callable[[Any], List[str]]
    from_row: Callable[[Sequence[str], LedgerRecordStore], Optional[Dict[str, Any]]]
    add: Callable[..., Any]


MAPPINGS: Dict[str, CsvMapping] = {
    'clients': CsvMapping(
        'clients', 'clients.csv', CLIENT_COLUMNS, 10,
        lambda store: store.clients, client_to_row, client_from_row,
        LedgerRecordStore.add_client,
    ),
    'products': CsvMapping(
        'products', 'products.csv', PRODUCT_COLUMNS, 10,
        lambda store: store.products, product_to_row, product_from_row,
        LedgerRecordStore.add_product,
    ),
    'projects': CsvMapping(
        'projects', 'projects.csv', PROJECT_COLUMNS, 8,
        lambda store: store.projects, project_to_row, project_from_row,
        LedgerRecordStore.add_project,
    ),
    'transactions': CsvMapping(
        'transactions', 'transactions.csv', TRANSACTION_COLUMNS, 5,
        lambda store: store.transactions, transaction_to_row, transaction_from_row,
        LedgerRecordStore.add_transaction,
    ),
}

EXPORT_FILENAMES = {name: mapping.filename for name, mapping in MAPPINGS.items()}


def get_mapping(entity: str) -> CsvMapping:
    try:
        return MAPPINGS[entity]
    except KeyError:
        raise ValueError(
            f"Unknown entity '{entity}'. Expected one of: {', '.join(MAPPINGS)}"
        ) from None


# =============================================================================
# EXPORT / IMPORT
# =============================================================================

def export_rows(store: LedgerRecordStore, entity: str) -> List[List[str]]:
    """Header row followed by one row per record."""
    mapping = get_mapping(entity)
    return [list(mapping.columns)] + [mapping.to_row(r) for r in mapping.records(store)]


def export_csv(store: LedgerRecordStore, entity: str) -> str:
    """Export one entity type as CSV text."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerows(export_rows(store, entity))
    return buffer.getvalue()


def _data_rows(text: str, min_columns: int) -> List[List[str]]:
    rows = []
    reader = csv.reader(io.StringIO(text.lstrip('\ufeff')))
    for line_number, row in enumerate(reader, start=1):
        if line_number == 1:
            continue
        values = [v.strip() for v in row]
        if not any(values):
            continue
        if len(values) < min_columns:
            logger.debug(f"Skipping line {line_number}: {len(values)} of {min_columns} columns")
            continue
        rows.append(values)
    return rows


def import_csv(store: LedgerRecordStore, entity: str, text: str) -> int:
    """
    Import CSV text for one entity type.

    Returns the number of records added. Validation errors raised by the
    add path (e.g. a circular component reference) reach the caller.
    """
    mapping = get_mapping(entity)
    rows = _data_rows(text, mapping.min_columns)

    if entity == 'products':
        return _import_products(store, mapping, rows)

    imported = 0
    for values in rows:
        fields = mapping.from_row(values, store)
        if fields is None:
            continue
        mapping.add(store, **fields)
        imported += 1

    logger.info(f"Imported {imported} {entity}")
    return imported


def _import_products(store: LedgerRecordStore, mapping: CsvMapping, rows: List[List[str]]) -> int:
    """
    Add every product first, then attach components by name, so a
    component listed later in the file can still be resolved.
    """
    pending = []
    for values in rows:
        product = mapping.add(store, **mapping.from_row(values, store))
        components = _parse_components(_at(values, 10))
        if components:
            pending.append((product, components))

    for product, components in pending:
        resolved = []
        for name, quantity in components:
            source = store.find_product_by_name(name)
            if source is None:
                logger.warning(f"Product '{product.name}': unknown component '{name}' skipped")
                continue
            resolved.append({'product_id': source.id, 'quantity': quantity})
        if resolved:
            store.update_product(product.id, components=resolved)

    logger.info(f"Imported {len(rows)} products")
    return len(rows)


def export_workbook(store: LedgerRecordStore, path) -> None:
    """Write every entity type to one XLSX sheet, using the CSV layout."""
    import openpyxl
    from openpyxl.styles import Font

    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    header_font = Font(bold=True)

    for entity in MAPPINGS:
        ws = wb.create_sheet(title=entity)
        for row_number, row in enumerate(export_rows(store, entity), 1):
            for col, value in enumerate(row, 1):
                cell = ws.cell(row=row_number, column=col, value=value)
                if row_number == 1:
                    cell.font = header_font

        # Auto-width columns
        for column in ws.columns:
            max_length = max(len(str(cell.value or '')) for cell in column)
            ws.column_dimensions[column[0].column_letter].width = max_length + 2

    wb.save(path)
    logger.info(f"Exported ledger workbook to {path}")
