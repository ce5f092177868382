"""Storage layer: one contract, three interchangeable backends."""
