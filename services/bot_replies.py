"""Reply texts sent back to users."""

from __future__ import annotations

from utils.errors import FailureReason, RejectReason


def start_text(max_images: int) -> str:
	"""Return the /start greeting."""
	return (
		"📸➡️📄 *Image to PDF Bot*\n\n"
		"Send me images (JPEG/PNG) and I'll convert them to a PDF file!\n\n"
		f"• Send up to {max_images} images to combine them\n"
		"• Type /convert when ready\n"
		"• /cancel to clear your images\n"
		"• Type /help to see how to use"
	)


def help_text(max_images: int) -> str:
	"""Return the /help usage guide."""
	return (
		"🆘 *How to use:*\n\n"
		"1. Send me images (as photos or files)\n"
		"2. When ready, type /convert\n"
		"3. I'll send you a PDF with all images\n\n"
		f"• Max {max_images} images per PDF\n"
		"• Images are ordered by send time\n"
		"• /cancel clears your current images"
	)


def cleared_text() -> str:
	return "🗑️ All cleared! Send new images to start over."


def image_added_text(count: int, max_images: int) -> str:
	return f"✅ Image added ({count}/{max_images}). Send more or /convert."


def unsupported_document_text() -> str:
	return "⚠️ Please send JPEG or PNG images only."


def unknown_input_text() -> str:
	return "Send me images, then type /convert. Type /help for details."


def document_caption(page_count: int) -> str:
	return f"📄 Your PDF ({page_count} images)"


def generic_error_text() -> str:
	return "❌ An error occurred. Please try again later."


def rejection_text(reason: RejectReason, max_images: int) -> str:
	"""Return the reply for an image that was not added."""
	if reason is RejectReason.CAPACITY_REACHED:
		return f"⚠️ Maximum {max_images} images per PDF. Type /convert to generate."
	if reason is RejectReason.FETCH_FAILED:
		return "❌ Couldn't download that image. Please send it again."
	return "❌ Failed to process image. Please try another file."


def assembly_failure_text(reason: FailureReason, max_megabytes: float) -> str:
	"""Return the reply for a /convert that produced no document."""
	if reason is FailureReason.NO_IMAGES:
		return "⚠️ No images to convert. Send images first."
	if reason is FailureReason.SIZE_LIMIT_EXCEEDED:
		return (
			f"⚠️ The PDF would be larger than {max_megabytes:.0f} MB. "
			"Your images were cleared; please send fewer or smaller images."
		)
	return "❌ Failed to create PDF. Please send your images again."
