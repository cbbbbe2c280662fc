from fastapi import Depends, FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from forwardzones import CheckerConfig, ConfigError, ForwardZoneChecker, ZoneSourceError
from forwardzones.probe import DNSPythonProbe, SOAProbe
from sinks import MemorySink
from zonesource import ForwardZonesClient

from . import __version__

app = FastAPI(title="DNSaaS forwarding zone checker", version=__version__)


# Configuration comes from FZ_* environment variables, read per request.
def get_config() -> CheckerConfig:
    try:
        return CheckerConfig.from_env().validate()
    except ConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))


def get_client(config: CheckerConfig = Depends(get_config)) -> ForwardZonesClient:
    return ForwardZonesClient.from_config(config)


def get_probe() -> SOAProbe:
    return DNSPythonProbe()


@app.get("/health")
def health():
    return {"ok": True}


# Run one full check and return every outcome
@app.get("/check")
def check(
    config: CheckerConfig = Depends(get_config),
    client: ForwardZonesClient = Depends(get_client),
    probe: SOAProbe = Depends(get_probe),
):
    try:
        zones = client.fetch()
    except ZoneSourceError as e:
        raise HTTPException(status_code=502, detail=str(e))

    sink = MemorySink()
    run = ForwardZoneChecker(config, sink=sink, probe=probe).run(zones)
    return JSONResponse(content=jsonable_encoder(run.to_dict()))
