"""Line searches for one-dimensional step-length sub-problems.

Example
-------
>>> from simplesolvers.linesearch import LineSearch, LineSearchProblem
>>> problem = LineSearchProblem(f=lambda a: (a - 1.0) ** 2, d=lambda a: 2 * (a - 1.0))
>>> LineSearch.backtracking().search(problem, 1.0)
1.0
"""

from .conditions import curvature_condition, sufficient_decrease
from .core import LineSearch, LineSearchKind
from .policies import bierlaire_search, bierlaire_update
from .problem import LineSearchCache, LineSearchProblem, shrink_until_finite

__all__ = [
    "LineSearch",
    "LineSearchCache",
    "LineSearchKind",
    "LineSearchProblem",
    "bierlaire_search",
    "bierlaire_update",
    "curvature_condition",
    "shrink_until_finite",
    "sufficient_decrease",
]
