"""
Route Book OCR Pipeline

This is the main script that turns photos of a route edit book into a
route table:
1. Loads images from the images/ folder
2. Uses Google Cloud Vision API to extract text
3. Parses the text into stops with our route book parser
4. Appends the stops of every image to one route book
5. Exports the route book to CSV, Excel or JSON

For Python beginners:
- This script ties together all the other modules
- It uses environment variables for configuration (from .env file)
- An image that cannot be read is reported and skipped; it never
  adds half-parsed stops to the route
"""

import os
import sys
from pathlib import Path
from datetime import datetime
from typing import List, Dict, Any
from dotenv import load_dotenv

# Google Cloud Vision imports
from google.cloud import vision

# Our custom modules
from config import SUPPORTED_IMAGE_EXTENSIONS, describe_settings
from parsers import RouteBookParser
from schemas import RouteBatch, RouteBook
from route_export import RouteExporter


class RouteBookPipeline:
    """
    Main pipeline class that handles the entire process.

    This class coordinates all the different steps:
    - Image loading
    - OCR text extraction
    - Route book parsing
    - Accumulating stops and exporting them
    """

    def __init__(self, vision_client=None):
        """
        Initialize the pipeline with configuration from environment variables.

        Args:
            vision_client: Optional ready-made Vision client; when omitted one
                is created from GOOGLE_APPLICATION_CREDENTIALS
        """

        # Load environment variables from .env file
        load_dotenv()

        # Get configuration from environment
        self.images_folder = os.getenv('IMAGES_FOLDER', 'images')
        self.output_folder = os.getenv('OUTPUT_FOLDER', 'output')
        self.max_batch_size = int(os.getenv('MAX_IMAGES_PER_BATCH', '10'))

        if vision_client is None:
            vision_client = self._create_vision_client()
        self.vision_client = vision_client

        self.parser = RouteBookParser()
        self.exporter = RouteExporter(self.output_folder)
        self.route_book = RouteBook()

        settings = describe_settings()
        print(f"✓ Route book pipeline initialized")
        print(f"  - Images folder: {self.images_folder}")
        print(f"  - Output folder: {self.output_folder}")
        print(f"  - Max batch size: {self.max_batch_size}")
        print(f"  - Street suffixes: {', '.join(settings['street_suffixes'])}")

    def _create_vision_client(self):
        """Create a Google Cloud Vision client from the configured credentials."""

        credentials_path = os.getenv('GOOGLE_APPLICATION_CREDENTIALS')
        if not credentials_path:
            raise ValueError(
                "GOOGLE_APPLICATION_CREDENTIALS environment variable not set. "
                "Please set it to the path of your Google Cloud service account JSON file."
            )

        if not os.path.exists(credentials_path):
            raise FileNotFoundError(f"Google Cloud credentials file not found: {credentials_path}")

        try:
            client = vision.ImageAnnotatorClient()
            print("✓ Google Cloud Vision client initialized successfully")
            return client
        except Exception as e:
            raise RuntimeError(f"Failed to initialize Google Cloud Vision client: {e}")

    def get_image_files(self) -> List[Path]:
        """
        Get all supported image files from the images folder.

        Returns:
            List of Path objects for valid image files
        """

        if not os.path.exists(self.images_folder):
            raise FileNotFoundError(f"Images folder not found: {self.images_folder}")

        image_files = []
        for file_path in Path(self.images_folder).iterdir():
            if file_path.is_file() and file_path.suffix.lower() in SUPPORTED_IMAGE_EXTENSIONS:
                image_files.append(file_path)

        return sorted(image_files)  # Sort for consistent processing order

    def extract_text_from_image(self, image_path: Path) -> Dict[str, Any]:
        """
        Extract text from a single image using Google Cloud Vision API.

        Args:
            image_path: Path to the image file

        Returns:
            Dictionary with the full detected text ("" when the image has
            no text) and the average word confidence (0-1)
        """

        with open(image_path, 'rb') as image_file:
            content = image_file.read()

        image = vision.Image(content=content)
        response = self.vision_client.text_detection(image=image)

        if response.error.message:
            raise RuntimeError(f"Vision API error: {response.error.message}")

        # The first text annotation contains all detected text
        texts = response.text_annotations
        if not texts:
            return {'text': '', 'confidence': 0.0}

        # Average confidence of the word annotations that report one
        confidences = [text.confidence for text in texts[1:] if hasattr(text, 'confidence')]
        avg_confidence = sum(confidences) / len(confidences) if confidences else 0.0

        return {'text': texts[0].description, 'confidence': avg_confidence}

    def process_single_image(self, image_path: Path) -> RouteBatch:
        """
        Process a single image through OCR and parsing.

        Args:
            image_path: Path to the image file

        Returns:
            RouteBatch with the stops found (none if OCR failed)
        """

        print(f"Processing: {image_path.name}")

        try:
            ocr_result = self.extract_text_from_image(image_path)
        except Exception as e:
            print(f"  ⚠️  OCR Error: {e}")
            return RouteBatch(
                source_file=image_path.name,
                extraction_date=datetime.now().date(),
                processing_notes=f"OCR Error: {e}"
            )

        print(f"  ✓ OCR completed (confidence: {ocr_result['confidence']:.2f})")

        batch = self.parser.parse_document(
            ocr_text=ocr_result['text'],
            source_file=image_path.name,
            ocr_confidence=ocr_result['confidence']
        )

        if batch.is_empty:
            print(f"  ⚠️  {batch.processing_notes}")
        else:
            print(f"  ✓ Parsing completed ({len(batch.stops)} stops found)")

        return batch

    def process_batch(self, image_files: List[Path]) -> List[RouteBatch]:
        """
        Process a batch of images, in order.

        Args:
            image_files: List of image file paths

        Returns:
            List of RouteBatch objects
        """

        results = []

        for i, image_path in enumerate(image_files, 1):
            print(f"\n[{i}/{len(image_files)}] ", end="")
            results.append(self.process_single_image(image_path))

        return results

    def run_pipeline(self, export_format: str = "csv") -> RouteBook:
        """
        Run the complete pipeline.

        Args:
            export_format: "csv", "excel", "json" or "all"

        Returns:
            The route book with the stops from every image
        """

        print("🚀 Starting Route Book Pipeline")
        print("=" * 50)

        # Step 1: Get all image files
        image_files = self.get_image_files()
        if not image_files:
            print("❌ No image files found in the images folder!")
            print(f"   Please add image files to: {self.images_folder}")
            return self.route_book

        print(f"📁 Found {len(image_files)} image files")

        # Step 2: Process images in batches and append their stops
        all_results = []
        total_batches = (len(image_files) + self.max_batch_size - 1) // self.max_batch_size

        for i in range(0, len(image_files), self.max_batch_size):
            batch = image_files[i:i + self.max_batch_size]
            batch_num = (i // self.max_batch_size) + 1

            print(f"\n📦 Processing Batch {batch_num}/{total_batches} ({len(batch)} files)")
            print("-" * 30)

            for result in self.process_batch(batch):
                all_results.append(result)
                self.route_book.append_batch(result.stops)

        duplicates = self.route_book.duplicate_sequences()
        if duplicates:
            print(f"\n⚠️  Sequence numbers used more than once: {', '.join(duplicates)}")

        # Step 3: Export
        exported = []
        if self.route_book.stops:
            print(f"\n💾 Exporting route book ({export_format})...")
            exported = self.exporter.export(self.route_book.stops, export_format)
            for path in exported:
                print(f"✓ Exported to: {path}")

        # Step 4: Print summary
        print(f"\n📊 Processing Summary")
        print("=" * 50)

        successful_files = sum(1 for result in all_results if not result.is_empty)

        print(f"Total images processed: {len(image_files)}")
        print(f"Images with stops: {successful_files}")
        print(f"Total stops found: {len(self.route_book.stops)}")
        print(f"Unique streets: {len(self.route_book.get_unique_streets())}")

        if exported:
            print("\n🎉 Pipeline completed successfully!")
        else:
            print("\n⚠️  Pipeline completed, but no stops were extracted.")
            print("   Try clearer photos of the route edit book.")

        return self.route_book


def main(argv: List[str] = None) -> int:
    """
    Main function - entry point of the script.

    Usage: python main.py [--csv|--excel|--json|--all]
    """

    argv = sys.argv[1:] if argv is None else argv
    formats = {"--csv": "csv", "--excel": "excel", "--json": "json", "--all": "all"}

    export_format = "csv"
    if argv:
        if argv[0] not in formats:
            print(f"❌ Unknown argument: {argv[0]}")
            print("Usage: python main.py [--csv|--excel|--json|--all]")
            return 1
        export_format = formats[argv[0]]

    try:
        pipeline = RouteBookPipeline()
        pipeline.run_pipeline(export_format)

    except KeyboardInterrupt:
        print("\n\n⏹️  Pipeline stopped by user (Ctrl+C)")
        return 130

    except Exception as e:
        print(f"\n❌ Unexpected error: {e}")
        print("\nTroubleshooting tips:")
        print("1. Check that your .env file is configured correctly")
        print("2. Verify your Google Cloud credentials are valid")
        print("3. Ensure the images folder exists and contains valid images")
        print("4. Check that all required packages are installed (pip install -e .)")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
