"""Application layer: ports and use cases of the JSON shipper."""
