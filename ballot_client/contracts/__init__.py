"""Read/write access to the on-chain ballot contract."""
