"""
Flask UI module.

Provides the browser front end for graphstep:
- JSON API for editing the graph and driving a run
- Sidebar page with the distance table and completion banner
"""
