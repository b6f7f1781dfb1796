from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

import main
from main import RouteBookPipeline


def vision_response(text=None, error="", word_confidences=()):
    annotations = []
    if text is not None:
        annotations.append(SimpleNamespace(description=text))
        annotations.extend(SimpleNamespace(description="word", confidence=c) for c in word_confidences)
    return SimpleNamespace(error=SimpleNamespace(message=error), text_annotations=annotations)


@pytest.fixture
def folders(tmp_path, monkeypatch):
    images = tmp_path / "images"
    output = tmp_path / "output"
    images.mkdir()
    monkeypatch.setenv("IMAGES_FOLDER", str(images))
    monkeypatch.setenv("OUTPUT_FOLDER", str(output))
    monkeypatch.setenv("MAX_IMAGES_PER_BATCH", "1")
    return images, output


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def pipeline(folders, client):
    return RouteBookPipeline(vision_client=client)


def write_images(folder, *names):
    for name in names:
        (folder / name).write_bytes(b"fake image")


def test_get_image_files_filters_and_sorts(pipeline, folders):
    images, _ = folders
    write_images(images, "page2.png", "page1.JPG", "notes.txt", "scan.tiff")
    assert [p.name for p in pipeline.get_image_files()] == ["page1.JPG", "page2.png"]


def test_get_image_files_missing_folder(pipeline, folders, tmp_path):
    pipeline.images_folder = str(tmp_path / "missing")
    with pytest.raises(FileNotFoundError):
        pipeline.get_image_files()


def test_extract_text_from_image(pipeline, client, folders):
    images, _ = folders
    write_images(images, "page1.jpg")
    client.text_detection.return_value = vision_response("5 100 OAK RD", word_confidences=[0.9, 0.7])
    result = pipeline.extract_text_from_image(images / "page1.jpg")
    assert result["text"] == "5 100 OAK RD"
    assert result["confidence"] == pytest.approx(0.8)


def test_extract_text_without_annotations(pipeline, client, folders):
    images, _ = folders
    write_images(images, "blank.jpg")
    client.text_detection.return_value = vision_response()
    assert pipeline.extract_text_from_image(images / "blank.jpg") == {"text": "", "confidence": 0.0}


def test_extract_text_raises_on_api_error(pipeline, client, folders):
    images, _ = folders
    write_images(images, "page1.jpg")
    client.text_detection.return_value = vision_response(error="quota exceeded")
    with pytest.raises(RuntimeError, match="quota exceeded"):
        pipeline.extract_text_from_image(images / "page1.jpg")


def test_ocr_failure_gives_no_stops(pipeline, client, folders):
    images, _ = folders
    write_images(images, "page1.jpg")
    client.text_detection.return_value = vision_response(error="bad image")
    batch = pipeline.process_single_image(images / "page1.jpg")
    assert batch.is_empty
    assert batch.processing_notes.startswith("OCR Error:")


def test_run_pipeline_appends_pages_in_order(pipeline, client, folders):
    images, output = folders
    write_images(images, "page1.jpg", "page2.jpg", "page3.jpg")
    client.text_detection.side_effect = [
        vision_response("SEQ ADDRESS\n1 100 OAK RD\n2 102"),
        vision_response(error="timeout"),
        vision_response("3 200 ELM DR\n4 202"),
    ]

    book = pipeline.run_pipeline("csv")

    assert [s.sequence for s in book.stops] == ["1", "2", "3", "4"]
    assert [s.street_name for s in book.stops] == ["OAK RD", "OAK RD", "ELM DR", "ELM DR"]
    assert len(list(Path(output).glob("*.csv"))) == 1


def test_run_pipeline_without_stops_exports_nothing(pipeline, client, folders):
    images, output = folders
    write_images(images, "page1.jpg")
    client.text_detection.return_value = vision_response("ROUTE 14")

    book = pipeline.run_pipeline("csv")

    assert book.stops == []
    assert list(Path(output).glob("*.csv")) == []


def test_missing_credentials(folders, monkeypatch):
    monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS", raising=False)
    monkeypatch.setattr(main, "load_dotenv", lambda: None)
    with pytest.raises(ValueError):
        RouteBookPipeline()


def test_main_rejects_unknown_argument():
    assert main.main(["--pdf"]) == 1


def test_batch_carries_ocr_confidence(pipeline, client, folders):
    images, _ = folders
    write_images(images, "page1.jpg")
    client.text_detection.return_value = vision_response("5 100 OAK RD", word_confidences=[0.6, 1.0])
    batch = pipeline.process_single_image(images / "page1.jpg")
    assert batch.ocr_confidence == pytest.approx(0.8)
    assert [s.sequence for s in batch.stops] == ["5"]
