"""External collaborators: the Prodigi catalog API and the currency service."""
