"""
rentdocs - Rental document assembly and rendering

Produces invoices, leases and welcome letters for a rental-property console by
resolving HTML templates against business records, merging them into a single
document and rendering that document into fixed-size pages.

Architecture:
- Templating Context: Placeholder/conditional resolution and template sources
- Assembly Context: Multi-document merge and print preparation
- Rendering Context: Flow measurement, pagination and PDF assembly
- Delivery Context: Download, print and email sinks
- Orchestration Context: Per-request pipeline state machine
"""

__version__ = "0.1.0"
