"""Services that read from the cluster and assemble the report."""
