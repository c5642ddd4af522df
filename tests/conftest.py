import pytest

from socweb.config import Config
from socweb.model import EcoState
from socweb.pajek import parse_food_web, parse_neighborhood
from socweb.stream import RandomStream

PREDATOR_PREY = """\
*Vertices 2
1 grass 0.5 0.1 0.1 0.3 10
2 rabbit 0.5 0.1 0.1 0.3 5
*Arcs
2 1
"""

THREE_LEVEL = """\
*Vertices 3
1 grass 0.5 0.1 0.1 0.3 100
2 rabbit 0.5 0.1 0.1 0.3 40
3 fox 0.5 0.1 0.1 0.3 10
*Arcs
2 1
3 2
"""

SINGLE_SPECIES = """\
*Vertices 1
1 grass 0.5 0.1 0.1 0.3 5
*Arcs
"""

ONE_SITE = """\
*Vertices 1
1 meadow 10
*Edges
"""

TWO_SITES = """\
*Vertices 2
1 a 100
2 b 100
*Edges
1 2 1
"""

RING = """\
*Vertices 3
1 a 300
2 b 300
3 c 300
*Edges
1 2 1
2 3 1
3 1 1
"""


class ScriptedStream(RandomStream):
    """Replays fixed fractions; index draws take the next fraction too."""

    def __init__(self, fractions):
        super().__init__(0)
        self.fractions = list(fractions)
        self.used = 0

    def fraction(self):
        value = self.fractions[self.used]
        self.used += 1
        return value

    def index(self, n):
        return min(int(self.fraction() * n), n - 1)

    def permutation(self, items):
        return list(items)


def build_state(food_web, landscape, populations=None, cfg=None, stream=None):
    """State with explicit ``old`` counts: populations[site][species]."""
    species = parse_food_web(food_web.splitlines())
    sites = parse_neighborhood(landscape.splitlines(), len(species))
    state = EcoState(cfg or Config(), species, sites, stream or RandomStream(1))
    for st, row in enumerate(populations or []):
        for sp, n in enumerate(row):
            state.sites[st].old[sp] = n
            state.sites[st].old_ini[sp] = n
    return state


@pytest.fixture
def predator_prey():
    return build_state(PREDATOR_PREY, ONE_SITE, [[6, 2]])


@pytest.fixture
def food_chain():
    return build_state(THREE_LEVEL, TWO_SITES, [[50, 20, 5], [30, 0, 2]])
