"""Infrastructure layer: filesystem access and the token compilation engine.

The service layer bridges between the domain (filters, registry) and the
on-disk source and build trees handled here.
"""
