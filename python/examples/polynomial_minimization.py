"""
Certified Polynomial Minimization Example
=========================================

This example minimizes a few polynomials over symmetric boxes and prints
the certified global enclosure next to the heuristic local estimate.

The global enclosure is PROVEN to contain the true minimum: boxes are only
discarded when another box's certified upper bound lies strictly below
their certified lower bound.

Run: python examples/polynomial_minimization.py
"""

import numpy as np
import certmin as cm


def report(result, true_minimum):
    lo, hi = result.enclosure.minimum_range()
    print(f"  Global: {result.global_bound}")
    point, value = result.local_estimate
    print(f"  Local:  f({point}) ==> {value}")
    print(f"  Minimum in [{float(lo):.6g}, {float(hi):.6g}]")
    contained = lo <= true_minimum <= hi
    print(f"  Contains {true_minimum}: {contained} ✓" if contained
          else f"  Contains {true_minimum}: {contained} ✗")
    print(f"  {result.iterations} iterations, {result.pruned} boxes pruned")


def main():
    print("=" * 60)
    print("CertMin Polynomial Minimization Examples")
    print("=" * 60)

    # Example 1: x^3 - 3x on [-2, 2], minimum -2 at x = -2 and x = 1
    print("\n[1] x^3 - 3x on [-2, 2]")
    print("-" * 40)
    x = cm.projection(0)
    cubic = x ** 3 - 3 * x
    report(cm.minimize(cubic, domain_exponent=1, time_budget=1.0), -2)

    # Example 2: a shifted bowl in two variables
    print("\n[2] (x - 1/2)^2 + (y + 1)^2 + 3 on [-4, 4]^2")
    print("-" * 40)
    y = cm.projection(1)
    bowl = (x - 0.5) ** 2 + (y + 1) ** 2 + 3
    result = cm.minimize(bowl, domain_exponent=2, time_budget=1.0)
    report(result, 3)
    centre = np.array([float(c) for c in result.best.centre()])
    print(f"  Distance of estimate from (0.5, -1): "
          f"{np.linalg.norm(centre - np.array([0.5, -1.0])):.3g}")

    # Example 3: reproducible run with an iteration-counted budget
    print("\n[3] x^4 - 4x^2 + x, 500 iterations")
    print("-" * 40)
    quartic = cm.polynomial([(1, 0, 4), (-4, 0, 2), (1, 0, 1)])
    result = cm.minimize(
        quartic, domain_exponent=2, time_budget=500,
        config=cm.SearchConfig.deterministic(),
    )
    lo, hi = result.enclosure.minimum_range()
    print(f"  Global: {result.global_bound}")
    print(f"  Minimum in [{float(lo):.6g}, {float(hi):.6g}]")
    print(f"  Frontier trace length: {len(result.trace)}")

    print("\n" + "=" * 60)
    print("Global enclosures use exact dyadic interval arithmetic.")
    print("Local estimates are heuristic and carry no guarantee.")
    print("=" * 60)


if __name__ == "__main__":
    main()
