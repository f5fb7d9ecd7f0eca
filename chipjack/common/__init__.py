"""Card primitives shared by the rest of the package."""
