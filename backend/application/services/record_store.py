"""
Ledger Record Store.

In-memory facade over the ledger collections (clients, products, projects,
transactions, stock movements). Holds no business rules of its own beyond
referential integrity on delete; the domain rules decide which ledger
records a change produces and the store writes them.

Every operation runs its whole chain (record change, ledger effects,
persistence flush) before returning. The store is meant for a single
writer: there is no locking and no concurrency token.
"""

from __future__ import annotations
from datetime import date
from typing import (
    Any, Callable, Dict, Generic, Iterable, Iterator, List, Mapping,
    Optional, Type, TypeVar,
)
import logging

from domain.catalog.bom import BOMResolver
from domain.catalog.entities import Product, ProductComponent, create_product
from domain.client.entities import Client, create_client
from domain.finance.entities import Transaction, create_transaction
from domain.inventory import ledger
from domain.inventory.entities import StockMovement, create_stock_movement
from domain.project import lifecycle
from domain.project.entities import Project, ProjectProduct, create_project
from domain.shared.base_entity import Clock, Entity, utc_now
from domain.shared.effects import EmitTransaction, LedgerEffect
from domain.shared.exceptions import (
    CircularReferenceException,
    ComponentInUseException,
    SideEffectException,
)
from domain.shared.repositories import CollectionStore

from .documents import from_document, to_document
from .settings import ledger_setting

logger = logging.getLogger(__name__)

E = TypeVar('E', bound=Entity)

CLIENTS = 'clients'
PRODUCTS = 'products'
PROJECTS = 'projects'
TRANSACTIONS = 'transactions'
STOCK_MOVEMENTS = 'stockMovements'
LEDGER_META = 'ledgerMeta'


class RecordCollection(Generic[E]):
    """
    Records of one type indexed by id.

    Insertion order is kept as a sequence number next to the index, so
    lookups stay O(1) and most-recent-first order is a derived view.
    """

    def __init__(self, name: str, record_cls: Type[E]):
        self.name = name
        self.record_cls = record_cls
        self._records: Dict[str, E] = {}
        self._sequence: Dict[str, int] = {}
        self._counter = 0

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: str) -> bool:
        return record_id in self._records

    def __iter__(self) -> Iterator[E]:
        return iter(self.all())

    def get(self, record_id: str) -> Optional[E]:
        return self._records.get(record_id)

    def as_mapping(self) -> Mapping[str, E]:
        return self._records

    def insert(self, record: E) -> E:
        self._counter += 1
        self._records[record.id] = record
        self._sequence[record.id] = self._counter
        return record

    def replace(self, record: E) -> E:
        """Swap in a new version of an existing record, keeping its position."""
        self._records[record.id] = record
        return record

    def remove(self, record_id: str) -> Optional[E]:
        self._sequence.pop(record_id, None)
        return self._records.pop(record_id, None)

    def remove_where(self, predicate: Callable[[E], bool]) -> List[E]:
        doomed = [r for r in self._records.values() if predicate(r)]
        for record in doomed:
            self.remove(record.id)
        return doomed

    def clear(self) -> None:
        self._records.clear()
        self._sequence.clear()

    def all(self) -> List[E]:
        """Records, most recently inserted first."""
        return sorted(
            self._records.values(),
            key=lambda r: self._sequence[r.id],
            reverse=True,
        )

    def load_documents(self, documents: Iterable[Dict[str, Any]]) -> None:
        """Replace the contents with stored documents (most recent first)."""
        self.clear()
        for document in reversed(list(documents)):
            self.insert(from_document(self.record_cls, document))

    def to_documents(self) -> List[Dict[str, Any]]:
        return [to_document(r) for r in self.all()]


class LedgerRecordStore:
    """
    Facade over the ledger collections.

    ``collection_store`` persists collections between sessions; without one
    the store is memory-only. ``clock`` supplies creation timestamps and
    the date of automatically emitted ledger entries.
    """

    def __init__(
        self,
        collection_store: Optional[CollectionStore] = None,
        clock: Optional[Clock] = None,
        strict_cost_resolution: Optional[bool] = None,
    ):
        if strict_cost_resolution is None:
            strict_cost_resolution = bool(
                ledger_setting('LEDGER_STRICT_COST_RESOLUTION', False)
            )
        self._collection_store = collection_store
        self._clock = clock or utc_now
        self.strict_cost_resolution = strict_cost_resolution

        self._clients: RecordCollection[Client] = RecordCollection(CLIENTS, Client)
        self._products: RecordCollection[Product] = RecordCollection(PRODUCTS, Product)
        self._projects: RecordCollection[Project] = RecordCollection(PROJECTS, Project)
        self._transactions: RecordCollection[Transaction] = RecordCollection(TRANSACTIONS, Transaction)
        self._stock_movements: RecordCollection[StockMovement] = RecordCollection(
            STOCK_MOVEMENTS, StockMovement
        )
        self._last_project_number = 0

    # =========================================================================
    # VIEWS
    # =========================================================================

    @property
    def clients(self) -> List[Client]:
        return self._clients.all()

    @property
    def products(self) -> List[Product]:
        return self._products.all()

    @property
    def projects(self) -> List[Project]:
        return self._projects.all()

    @property
    def transactions(self) -> List[Transaction]:
        return self._transactions.all()

    @property
    def stock_movements(self) -> List[StockMovement]:
        return self._stock_movements.all()

    def get_client(self, client_id: str) -> Optional[Client]:
        return self._clients.get(client_id)

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def get_project(self, project_id: str) -> Optional[Project]:
        return self._projects.get(project_id)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    def find_client_by_name(self, name: str) -> Optional[Client]:
        return next((c for c in self._clients.all() if c.name == name), None)

    def find_product_by_name(self, name: str) -> Optional[Product]:
        return next((p for p in self._products.all() if p.name == name), None)

    def today(self) -> date:
        return self._clock().date()

    def is_empty(self) -> bool:
        return not (len(self._clients) or len(self._projects) or len(self._products))

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _collections(self) -> List[RecordCollection]:
        return [
            self._clients,
            self._products,
            self._projects,
            self._transactions,
            self._stock_movements,
        ]

    def load(self) -> None:
        """
        Load every collection from the collection store.

        A collection that fails to load starts empty; the failure is logged.
        """
        if self._collection_store is None:
            return

        for collection in self._collections():
            try:
                documents = self._collection_store.load(collection.name, [])
                collection.load_documents(documents)
            except Exception as e:
                logger.error(f"Error loading {collection.name}: {e}")
                collection.clear()

        try:
            meta = self._collection_store.load(LEDGER_META, [])
            stored_number = int(meta[0].get('last_project_number', 0)) if meta else 0
        except Exception as e:
            logger.error(f"Error loading {LEDGER_META}: {e}")
            stored_number = 0
        self._last_project_number = max(stored_number, self._max_project_number())

        logger.info(
            f"Ledger loaded: {len(self._clients)} clients, {len(self._products)} products, "
            f"{len(self._projects)} projects"
        )

    def _save(self, *names: str) -> None:
        """
        Write the named collections to the collection store.

        Failures are logged; the in-memory state stays authoritative.
        """
        if self._collection_store is None:
            return

        by_name = {c.name: c for c in self._collections()}
        for name in names:
            if name == LEDGER_META:
                documents = [{'last_project_number': self._last_project_number}]
            else:
                documents = by_name[name].to_documents()
            try:
                self._collection_store.save(name, documents)
            except Exception as e:
                logger.error(f"Error saving {name}: {e}")

    def save_all(self) -> None:
        self._save(CLIENTS, PRODUCTS, PROJECTS, TRANSACTIONS, STOCK_MOVEMENTS, LEDGER_META)

    def seed_demo_data(self) -> bool:
        """
        Insert a demo client and a demo raw material on first-time setup.

        Returns False (and does nothing) if the ledger already has data.
        """
        if not self.is_empty():
            return False

        logger.info("First time setup - adding demo data")
        self.add_client(
            name="João Silva",
            type="individual",
            person_tax_id="123.456.789-00",
            email="joao@email.com",
            phone="(11) 3333-4444",
            mobile="(11) 98888-7777",
            active=True,
            address={
                'country': 'Brasil',
                'state': 'SP',
                'city': 'São Paulo',
                'zip_code': '01310-100',
                'neighborhood': 'Centro',
                'street_type': 'Rua',
                'street': 'Exemplo',
            },
        )
        self.add_product(
            name="Plywood Sheet",
            description="15mm plywood",
            category="Wood",
            type="raw_material",
            unit="M2",
            cost_price="120.00",
            sale_price="180.00",
            current_stock=50,
            min_stock=10,
        )
        return True

    # =========================================================================
    # CLIENTS
    # =========================================================================

    def add_client(self, **fields) -> Client:
        client = self._clients.insert(create_client(clock=self._clock, **fields))
        self._save(CLIENTS)
        return client

    def update_client(self, client_id: str, **changes) -> Optional[Client]:
        current = self._clients.get(client_id)
        if current is None:
            return None
        client = self._clients.replace(current.merge(changes))
        self._save(CLIENTS)
        return client

    def delete_client(self, client_id: str) -> bool:
        if self._clients.remove(client_id) is None:
            return False
        self._save(CLIENTS)
        return True

    # =========================================================================
    # PRODUCTS
    # =========================================================================

    def bom_resolver(self) -> BOMResolver:
        return BOMResolver(self._products.as_mapping(), strict=self.strict_cost_resolution)

    def _snapshot_components(
        self,
        resolver: BOMResolver,
        components: Iterable[ProductComponent],
    ) -> List[ProductComponent]:
        snapshots = []
        for component in components:
            source = self._products.get(component.product_id)
            if source is None:
                snapshots.append(component)
                continue
            snapshots.append(component.with_snapshot(
                source.name,
                source.unit,
                resolver.resolve_cost(source.id),
            ))
        return snapshots

    def add_product(self, **fields) -> Product:
        """
        Add a product to the catalog.

        Raises CircularReferenceException if a component would make the
        product contain itself.
        """
        product = create_product(clock=self._clock, **fields)
        resolver = self.bom_resolver()
        resolver.check_components(product.id, product.components)
        product.components = self._snapshot_components(resolver, product.components)

        self._products.insert(product)
        self._save(PRODUCTS)
        return product

    def update_product(self, product_id: str, **changes) -> Optional[Product]:
        """
        Partially update a product.

        A component change that would close a cycle is rejected with
        CircularReferenceException and the catalog is left unchanged.
        """
        current = self._products.get(product_id)
        if current is None:
            return None

        updated = current.merge(changes)
        if 'components' in changes:
            resolver = self.bom_resolver()
            try:
                resolver.check_components(product_id, updated.components)
            except CircularReferenceException:
                logger.warning(f"Rejected component change for product {product_id}")
                raise
            updated.components = self._snapshot_components(resolver, updated.components)

        self._products.replace(updated)
        self._save(PRODUCTS)
        return updated

    def delete_product(self, product_id: str) -> bool:
        """
        Delete a product.

        Raises ComponentInUseException if another product uses it as a
        component.
        """
        if product_id not in self._products:
            return False

        used_in = [p.id for p in self._products.all() if p.uses(product_id)]
        if used_in:
            raise ComponentInUseException(product_id, used_in)

        self._products.remove(product_id)
        self._save(PRODUCTS)
        return True

    def calculate_product_cost(self, product_id: str):
        return self.bom_resolver().resolve_cost(product_id)

    def available_components(self, product_id: Optional[str] = None) -> List[Product]:
        """Products that can be picked as a component of ``product_id``."""
        candidates = self.bom_resolver().available_components(product_id)
        order = {p.id: i for i, p in enumerate(self._products.all())}
        return sorted(candidates, key=lambda p: order[p.id])

    # =========================================================================
    # PROJECTS
    # =========================================================================

    def _max_project_number(self) -> int:
        return max((p.number for p in self._projects.as_mapping().values()), default=0)

    def _next_project_number(self) -> int:
        self._last_project_number = max(self._last_project_number, self._max_project_number()) + 1
        return self._last_project_number

    def add_project(self, **fields) -> Project:
        """
        Add a project and apply the ledger effects of its creation.

        The project keeps its number even if applying the effects fails.
        """
        project = create_project(clock=self._clock, **fields)
        project.number = self._next_project_number()
        self._projects.insert(project)
        self._save(PROJECTS, LEDGER_META)

        effects = lifecycle.plan_creation(project, self._products.as_mapping(), self.today())
        self._execute_effects(project.id, effects)
        return project

    def update_project(self, project_id: str, **changes) -> Optional[Project]:
        """
        Partially update a project and apply the ledger effects of the change.
        """
        current = self._projects.get(project_id)
        if current is None:
            return None

        project, effects = lifecycle.transition(current, changes, self.today())
        self._projects.replace(project)
        self._save(PROJECTS)

        self._execute_effects(project.id, effects)
        return project

    def delete_project(self, project_id: str) -> bool:
        """
        Delete a project with every transaction and stock movement tagged
        with its id. Stock counters are restored by the removed movements.
        """
        if self._projects.remove(project_id) is None:
            return False

        removed_transactions = self._transactions.remove_where(lambda t: t.project_id == project_id)
        removed_movements = self._stock_movements.remove_where(lambda m: m.project_id == project_id)
        for movement in removed_movements:
            product = self._products.get(movement.product_id)
            if product is not None:
                product.current_stock -= movement.signed_quantity

        logger.info(
            f"Deleted project {project_id} with {len(removed_transactions)} transactions "
            f"and {len(removed_movements)} stock movements"
        )
        self._save(PROJECTS, TRANSACTIONS, STOCK_MOVEMENTS, PRODUCTS)
        return True

    def _execute_effects(self, project_id: str, effects: List[LedgerEffect]) -> None:
        if not effects:
            return

        try:
            for index, effect in enumerate(effects):
                try:
                    if isinstance(effect, EmitTransaction):
                        self._transactions.insert(
                            create_transaction(clock=self._clock, **effect.draft.as_fields())
                        )
                    else:
                        self._record_movement(effect.draft.as_fields())
                except Exception as e:
                    logger.error(f"Ledger effect {effect.effect_type} failed for project {project_id}: {e}")
                    raise SideEffectException(project_id, effects[index:], e) from e
        finally:
            self._save(TRANSACTIONS, STOCK_MOVEMENTS, PRODUCTS)

        logger.info(f"Applied {len(effects)} ledger effects for project {project_id}")

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def add_transaction(self, **fields) -> Transaction:
        transaction = self._transactions.insert(create_transaction(clock=self._clock, **fields))
        self._save(TRANSACTIONS)
        return transaction

    def update_transaction(self, transaction_id: str, **changes) -> Optional[Transaction]:
        current = self._transactions.get(transaction_id)
        if current is None:
            return None
        transaction = self._transactions.replace(current.merge(changes))
        self._save(TRANSACTIONS)
        return transaction

    def delete_transaction(self, transaction_id: str) -> bool:
        if self._transactions.remove(transaction_id) is None:
            return False
        self._save(TRANSACTIONS)
        return True

    # =========================================================================
    # STOCK
    # =========================================================================

    def _record_movement(self, fields: Dict[str, Any]) -> StockMovement:
        movement = create_stock_movement(clock=self._clock, **fields)
        product = self._products.get(movement.product_id)
        if product is not None:
            ledger.apply_movement(product, movement)
        else:
            logger.warning(f"Stock movement for unknown product {movement.product_id}")
        return self._stock_movements.insert(movement)

    def apply_movement(self, **fields) -> StockMovement:
        """Record a stock movement and update the product's stock counter."""
        movement = self._record_movement(fields)
        self._save(STOCK_MOVEMENTS, PRODUCTS)
        return movement

    def cascade_project_consumption(
        self,
        project_id: str,
        line_items: Iterable[Any],
    ) -> List[StockMovement]:
        """
        Record the outgoing movements for the products sold by a project,
        in line-item order, each top-level movement before its components.
        """
        project = self._projects.get(project_id)
        drafts = ledger.plan_project_consumption(
            project_id,
            [ProjectProduct.from_value(item) for item in line_items],
            self._products.as_mapping(),
            on_date=self.today(),
            project_title=project.title if project else None,
        )
        movements = [self._record_movement(draft.as_fields()) for draft in drafts]
        self._save(STOCK_MOVEMENTS, PRODUCTS)
        return movements

    def ledger_balance(self, product_id: str):
        """Signed sum of the stock movements recorded for a product."""
        return ledger.stock_balance(self._stock_movements.as_mapping().values(), product_id)
