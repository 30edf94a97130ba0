import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from branch_bot.menu_data_cache import MenuCache
from branch_bot.models import Base
from branch_bot.services.session import SessionStore
from branch_bot.tasks.menu_parser import MenuParser
from branch_bot.tasks.models import MenuItem
from branch_bot.tasks.recommendation import RecommendationEngine


# Cafe menu mixing all three price line formats, pasted from an admin log
CAFE_MENU = """\
*POSTRES*
✅ Producto 67: • Crepes de Nutella - - $8500
✅ Producto 68: • Flan de Caramelo - - $5500

☕ BEBIDAS CALIENTES
Café - $3000
Café Americano - $3.500
Cappuccino $4500
Chocolate caliente $4,000

Bebidas Frías:
Limonada de coco.....$6000
Jugo de mora $5000

🥐 PANADERÍA
Croissant - $4200
Pan - $900
Pedidos al 300 123 4567
"""

# Wings menu whose combo prices were compressed onto their own lines
WINGS_COMBO_MENU = """\
🍗 ALITAS LA 70 🍗
Combos con papas y salsas de la casa
Combo 1, Combo 2, Combo 3
$18,000 $24,500 $29.900
Combo Emparejado, Combo Familiar 1, Combo Familiar 2
$45.000 $62.000 $89.000
"""

# Restaurant menu used by the recommendation tests
RESTAURANT_MENU = """\
*DESAYUNOS*
Huevos pericos con arepa - $9000
Café con leche - $3500

*PLATOS FUERTES*
Bandeja con carne asada - $28000
Pollo a la plancha - $22000
Arroz con vegetales - $16000
Pasta carbonara - $26000
Alitas picantes - $21000

*BEBIDAS*
Copa de vino tinto - $15000
Limonada natural - $5000
"""


@pytest.fixture
def cafe_menu_text():
    return CAFE_MENU


@pytest.fixture
def wings_menu_text():
    return WINGS_COMBO_MENU


@pytest.fixture
def cafe_items():
    return MenuParser().parse(CAFE_MENU)


@pytest.fixture
def restaurant_items():
    return MenuParser().parse(RESTAURANT_MENU)


@pytest.fixture
def make_item():
    """Factory for MenuItem records with sensible defaults."""
    counter = {"n": 0}

    def _make(display_name, price, description="", category=""):
        counter["n"] += 1
        return MenuItem(
            id=f"prod_{counter['n']}",
            name=display_name.lower(),
            display_name=display_name,
            price=price,
            category=category,
            description=description,
        )

    return _make


@pytest.fixture
def engine():
    """RecommendationEngine with the default question bank."""
    return RecommendationEngine()


@pytest.fixture
def db_session():
    """Create an in-memory SQLite database for testing.

    Uses StaticPool so all connections share the same in-memory database.
    """
    db_engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    Base.metadata.create_all(bind=db_engine)

    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def session_store():
    """Fresh SessionStore with an empty cache."""
    store = SessionStore()
    yield store
    store.clear_cache()


@pytest.fixture
def menu_cache():
    return MenuCache()
