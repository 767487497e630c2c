from __future__ import annotations

from fastapi import FastAPI, File, Form, HTTPException, Response, UploadFile
from pydantic import BaseModel, Field

from ...engine import ReceiptIngestService, ReceiptPipeline
from ...errors import ReceiptPipelineError
from ...models import CapturedImage, Folder, ProcessedReceipt, Receipt
from ...project_paths import ProjectPaths
from ...settings import Settings
from ...storage import ReceiptStore


class ParseTextRequest(BaseModel):
    text: str = Field(min_length=1)


class FolderRequest(BaseModel):
    name: str = Field(min_length=1)
    sort_order: int | None = None


class MoveReceiptRequest(BaseModel):
    folder_id: str | None = None


def create_app(
    pipeline: ReceiptPipeline | None = None,
    store: ReceiptStore | None = None,
) -> FastAPI:
    if pipeline is None or store is None:
        paths = ProjectPaths.detect()
        store = store or ReceiptStore(paths)
        pipeline = pipeline or ReceiptPipeline.from_settings(Settings.from_env(), paths)
    ingest_service = ReceiptIngestService(pipeline, store)

    app = FastAPI(title="Receipt Store Service", version="0.1.0")

    @app.get("/healthz")
    def healthz() -> dict:
        return {"status": "ok"}

    @app.post("/receipts/parse_text", response_model=ProcessedReceipt)
    async def parse_text(req: ParseTextRequest) -> ProcessedReceipt:
        try:
            return await pipeline.process_text(req.text)
        except ReceiptPipelineError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

    @app.post("/receipts/ingest", response_model=Receipt)
    async def ingest(
        images: list[UploadFile] = File(...),
        folder_id: str | None = Form(None),
    ) -> Receipt:
        captured = [CapturedImage(filename=image.filename, data=await image.read()) for image in images]
        try:
            return await ingest_service.ingest(captured, folder_id=folder_id)
        except ReceiptPipelineError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=f"Folder not found: {folder_id}") from exc

    @app.get("/receipts", response_model=list[Receipt])
    def list_receipts(folder_id: str | None = None) -> list[Receipt]:
        return store.list_receipts(folder_id=folder_id)

    @app.get("/receipts/{receipt_id}", response_model=Receipt)
    def get_receipt(receipt_id: str) -> Receipt:
        try:
            return store.get_receipt(receipt_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=f"Receipt not found: {receipt_id}") from exc

    @app.delete("/receipts/{receipt_id}", status_code=204)
    def delete_receipt(receipt_id: str) -> Response:
        try:
            store.delete_receipt(receipt_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=f"Receipt not found: {receipt_id}") from exc
        return Response(status_code=204)

    @app.put("/receipts/{receipt_id}/folder", response_model=Receipt)
    def move_receipt(receipt_id: str, req: MoveReceiptRequest) -> Receipt:
        try:
            return store.move_receipt(receipt_id, req.folder_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=f"Not found: {exc.args[0]}") from exc

    @app.get("/folders", response_model=list[Folder])
    def list_folders() -> list[Folder]:
        return store.list_folders()

    @app.post("/folders", response_model=Folder, status_code=201)
    def create_folder(req: FolderRequest) -> Folder:
        return store.create_folder(req.name, sort_order=req.sort_order)

    @app.delete("/folders/{folder_id}", status_code=204)
    def delete_folder(folder_id: str) -> Response:
        try:
            store.delete_folder(folder_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=f"Folder not found: {folder_id}") from exc
        return Response(status_code=204)

    return app
