"""
Tenant Console - lifecycle management for storage cluster tenants.

The console is a client of the cluster orchestrator, never the owner of
tenant state. Responsibilities:
- Tenant summaries (capacity, zones, lifecycle phase)
- Zone expansion with topology validation
- Image / console image / pull secret updates
- Admin client resolution from tenant secrets and services
"""
