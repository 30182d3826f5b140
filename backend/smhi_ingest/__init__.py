"""
SMHI Telemetry Ingest
=====================

Fetches the latest SMHI observations for a station and stores them as a
telemetry record for whoever owns that station in the device backend.

HOW IT'S ORGANIZED:
------------------
- models/     = Data structures (what does a reading look like?)
- services/   = Workers (fetch from SMHI, talk to the backend, run the pipeline)
- routers/    = API endpoints
- handler.py  = Serverless entrypoint
- main.py     = FastAPI app
"""
