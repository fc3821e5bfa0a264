"""Perfect mazes carved over relaxed Voronoi tessellations."""

__version__ = "0.1.0"
