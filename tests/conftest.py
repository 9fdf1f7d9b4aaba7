import pytest
from charm.toolbox.pairinggroup import G1

from kuibe import core
from kuibe.core import MasterSecret, SetupResult, SystemParameters
from kuibe.engine import CharmPairingEngine, ToyPairingEngine
from kuibe.oracles import make_oracles

# Fixed toy parameters over Z_23 in exponent form:
#   g = 5, alpha = 3, g2 = 2, g3 = 4, U = 6, V = 9
# W(id) = 6*id + 9 (mod 23) vanishes at id = 10.
TOY_P = 23
TOY_ALPHA = 3
TOY_BAD_ID = 10


@pytest.fixture
def toy_bad_id():
    """Identity whose binding W is the identity of G1 under the `toy` params."""
    return TOY_BAD_ID


@pytest.fixture
def toy():
    engine = ToyPairingEngine(TOY_P)
    g = engine.element(G1, 5)
    params = SystemParameters(
        engine=engine,
        g=g,
        g1=g ** TOY_ALPHA,
        g2=engine.element(G1, 2),
        g3=engine.element(G1, 4),
        U=engine.element(G1, 6),
        V=engine.element(G1, 9),
        oracles=make_oracles(engine),
    )
    return SetupResult(params=params, msk=MasterSecret(alpha=engine.scalar(TOY_ALPHA)))


@pytest.fixture(scope="module")
def ss512():
    return core.setup(CharmPairingEngine("SS512"))
