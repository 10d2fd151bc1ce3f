"""
schemasplit - split consolidated contract schema files

A contract schema generator writes one JSON document per contract holding
every message and response schema.  schemasplit walks a workspace, splits
each of those documents into one file per message kind and per response,
and removes the consolidated original so that JSON-Schema-to-TypeScript
generators see one schema per file.

Main Components:
    - schemasplit.walker: lazy directory traversal with build/VCS pruning
    - schemasplit.splitter: recognising and splitting one document
    - schemasplit.batch: running a split over a whole tree
    - schemasplit.cli: ``schemasplit`` command line
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
