"""
Pajek network files
===================
Readers for the two input networks and a writer for exported ones.

Food web::

    *Vertices 3
    1 grass 0.5 0.1 0.1 0.3 100
    2 rabbit 0.5 0.1 0.1 0.3 40
    3 fox 0.5 0.1 0.1 0.3 10
    *Arcs
    2 1          <- species 2 preys on species 1
    3 2

Spatial neighborhood::

    *Vertices 2
    1 north 200
    2 south 150
    *Edges
    1 2 1        <- site 2 (weight 1) joins the neighborhood of site 1
    2 1 1
"""

import logging
import os

from .errors import NetworkFileError
from .model import Site, Species

logger = logging.getLogger(__name__)


def _tokenized(lines):
    for line_no, raw in enumerate(lines, start=1):
        line = raw.split("%", 1)[0].strip()
        if line:
            yield line_no, line.split()


def _read_lines(path):
    try:
        with open(path) as f:
            return f.readlines()
    except OSError as exc:
        raise NetworkFileError(path, f"cannot read file ({exc.strerror})") from exc


def _vertex_block(rows, source, width):
    """Split tokenized rows into (vertex rows, edge rows) after '*Vertices N'."""
    if not rows or rows[0][1][0].lower() != "*vertices" or len(rows[0][1]) < 2:
        raise NetworkFileError(source, "expected '*Vertices N' header", rows[0][0] if rows else None)
    line_no, header = rows[0]
    try:
        n = int(header[1])
    except ValueError:
        raise NetworkFileError(source, f"bad vertex count {header[1]!r}", line_no) from None
    vertices = rows[1:1 + n]
    if len(vertices) < n:
        raise NetworkFileError(source, f"declared {n} vertices, found {len(vertices)}")
    for line_no, tokens in vertices:
        if tokens[0].startswith("*") or len(tokens) < width:
            raise NetworkFileError(source, f"expected {width} fields per vertex", line_no)
    edges = rows[1 + n:]
    if edges and edges[0][1][0].startswith("*"):
        edges = edges[1:]
    return vertices, edges


def _lookup(index, sid, source, line_no, kind):
    try:
        return index[sid]
    except KeyError:
        raise NetworkFileError(source, f"unknown {kind} id {sid}", line_no) from None


def parse_food_web(lines, source="<food web>"):
    """Build the species arena with prey/predator lists from Pajek text."""
    rows = list(_tokenized(lines))
    vertices, edges = _vertex_block(rows, source, 7)

    species = []
    index = {}
    for line_no, tokens in vertices:
        try:
            sid = int(tokens[0])
            bp, dp, ndp, mp = (float(x) for x in tokens[2:6])
            n_ini = int(tokens[6])
        except ValueError:
            raise NetworkFileError(source, "malformed species line", line_no) from None
        if sid in index:
            raise NetworkFileError(source, f"duplicate species id {sid}", line_no)
        if not all(0.0 <= p <= 1.0 for p in (bp, dp, ndp, mp)) or n_ini < 0:
            raise NetworkFileError(source, "probabilities must lie in [0, 1] and counts be >= 0", line_no)
        index[sid] = len(species)
        species.append(Species(sid, tokens[1], bp, dp, ndp, mp, n_ini))

    for line_no, tokens in edges:
        if len(tokens) < 2 or tokens[0].startswith("*"):
            raise NetworkFileError(source, "expected 'predator prey' pair", line_no)
        try:
            pred_id, prey_id = int(tokens[0]), int(tokens[1])
        except ValueError:
            raise NetworkFileError(source, "malformed trophic link", line_no) from None
        pred = _lookup(index, pred_id, source, line_no, "species")
        prey = _lookup(index, prey_id, source, line_no, "species")
        species[pred].prey.append(prey)
        species[prey].predators.append(pred)

    for sp in species:
        if not sp.prey and not sp.predators:
            logger.warning("%s: species %d (%s) has no trophic links", source, sp.id, sp.name)
    return species


def parse_neighborhood(lines, n_species, source="<neighborhood>"):
    """Build the site arena with weighted neighborhoods from Pajek text."""
    rows = list(_tokenized(lines))
    vertices, edges = _vertex_block(rows, source, 3)

    sites = []
    index = {}
    for line_no, tokens in vertices:
        try:
            sid, cc = int(tokens[0]), int(tokens[2])
        except ValueError:
            raise NetworkFileError(source, "malformed site line", line_no) from None
        if sid in index:
            raise NetworkFileError(source, f"duplicate site id {sid}", line_no)
        if cc < 0:
            raise NetworkFileError(source, "carrying capacity cannot be negative", line_no)
        index[sid] = len(sites)
        sites.append(Site(sid, tokens[1], cc, n_species))

    for line_no, tokens in edges:
        if len(tokens) < 3 or tokens[0].startswith("*"):
            raise NetworkFileError(source, "expected 'site neighbor weight'", line_no)
        try:
            a, b, weight = int(tokens[0]), int(tokens[1]), float(tokens[2])
        except ValueError:
            raise NetworkFileError(source, "malformed neighborhood link", line_no) from None
        src = _lookup(index, a, source, line_no, "site")
        dst = _lookup(index, b, source, line_no, "site")
        sites[src].add_neighbor(dst, weight)

    for st in sites:
        if not st.neighbors:
            logger.warning("%s: site %d (%s) has no neighbors", source, st.id, st.name)
    return sites


def read_food_web(path):
    species = parse_food_web(_read_lines(path), source=path)
    logger.info("loaded %d species from %s", len(species), path)
    return species


def read_neighborhood(path, n_species):
    sites = parse_neighborhood(_read_lines(path), n_species, source=path)
    logger.info("loaded %d sites from %s", len(sites), path)
    return sites


def write_network(path, labels, edges, directed=False):
    """Write a Pajek network. ``edges`` holds (from index, to index, value)."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w") as f:
        f.write(f"*Vertices {len(labels)}\n")
        for i, label in enumerate(labels):
            f.write(f"{i + 1} {label}\n")
        f.write("*Arcs\n" if directed else "*Edges\n")
        for a, b, value in edges:
            f.write(f"{a + 1} {b + 1} {value:g}\n")


def write_food_web(path, species):
    """Export species with their declared rates and trophic arcs."""
    with open(path, "w") as f:
        f.write(f"*Vertices {len(species)}\n")
        for sp in species:
            bp, dp, ndp, mp = sp.declared
            f.write(f"{sp.id} {sp.name} {bp:g} {dp:g} {ndp:g} {mp:g} {sp.initial_count}\n")
        f.write("*Arcs\n")
        for sp in species:
            for prey in sp.prey:
                f.write(f"{sp.id} {species[prey].id}\n")
