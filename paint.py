import os
import sys
import time
import warnings
from argparse import ArgumentParser
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf
import PIL.Image

from huebrot import BACKENDS, ConfigurationError, RenderSettings, render

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")


def pick_device():
    """Use the first visible GPU for the row kernel, falling back to the CPU."""

    gpus = tf.config.list_physical_devices('GPU')
    if not gpus:
        log("No GPU found, using CPU")
        return '/CPU:0'
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as e:
        # Memory growth can only be set before the GPUs are initialised.
        log(e)
        return '/CPU:0'
    log("GPU found, using %s" % gpus[0].name)
    return '/GPU:0'


def build_parser():
    parser = ArgumentParser(description='Render a hue-rotation Mandelbrot image.')

    parser.add_argument('--x-min', type=float, dest='x_min', metavar='X_MIN', default=-0.08,
                        help='real coordinate mapped to the left edge of the image')
    parser.add_argument('--x-max', type=float, dest='x_max', metavar='X_MAX', default=-0.07,
                        help='real coordinate approached by the right edge of the image')
    parser.add_argument('--y-min', type=float, dest='y_min', metavar='Y_MIN', default=-0.825,
                        help='imaginary coordinate mapped to the top edge of the image')
    parser.add_argument('--y-max', type=float, dest='y_max', metavar='Y_MAX', default=-0.835,
                        help='imaginary coordinate approached by the bottom edge of the image')

    parser.add_argument('--x-center', type=float, dest='x_center', metavar='X_CENTER', default=None,
                        help='real coordinate of the window centre. Use with --y-center, --x-width and --y-width instead of the bounds.')
    parser.add_argument('--y-center', type=float, dest='y_center', metavar='Y_CENTER', default=None,
                        help='imaginary coordinate of the window centre')
    parser.add_argument('--x-width', type=float, dest='x_width', metavar='X_WIDTH', default=None,
                        help='width of the window in the complex plane')
    parser.add_argument('--y-width', type=float, dest='y_width', metavar='Y_WIDTH', default=None,
                        help='height of the window in the complex plane')

    parser.add_argument('--width', type=int, dest='width', metavar='WIDTH', default=4000,
                        help='image width in pixels')
    parser.add_argument('--height', type=int, dest='height', metavar='HEIGHT', default=4000,
                        help='image height in pixels')

    parser.add_argument('--speed', type=float, dest='speed', metavar='SPEED', default=3.0,
                        help='hue rotation in degrees per iteration')
    parser.add_argument('--max-iterations', type=int, dest='max_iterations', metavar='MAX_ITERATIONS', default=500,
                        help='maximum number of iterations before a point counts as bounded')

    parser.add_argument('--workers', type=int, dest='workers', metavar='WORKERS', default=None,
                        help='number of row worker threads. Default: one per CPU.')
    parser.add_argument('--backend', choices=BACKENDS, default='tensorflow',
                        help='row evaluator: vectorised "tensorflow" or pure "python".')

    parser.add_argument('--output', type=str, dest='output', metavar='OUTPUT', default='mandelbrot.jpg',
                        help='destination image file')
    parser.add_argument('--format', type=str, dest='format', metavar='FORMAT', default=None,
                        help='any format supported by Pillow. Default: taken from the --output suffix.')
    parser.add_argument('--quality', type=int, dest='quality', metavar='QUALITY', default=90,
                        help='JPEG quality (1-100).')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def _pil_format_name(ext):
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def resolve_output(opt, parser):
    output_path = Path(opt.output).expanduser()
    image_format = (opt.format or output_path.suffix or "jpg").lower().lstrip(".")
    if not image_format:
        parser.error("--format must not be empty.")
    pil_format = _pil_format_name(image_format)
    if pil_format not in set(PIL.Image.registered_extensions().values()):
        parser.error(f"Pillow cannot write {image_format} images.")

    suffix = output_path.suffix
    if not suffix:
        output_path = output_path.with_suffix(f".{image_format}")
    elif _pil_format_name(suffix.lstrip(".")) != pil_format:
        parser.error(f"--output extension {suffix} does not match --format {image_format}.")

    if not 1 <= opt.quality <= 100:
        parser.error("--quality must be between 1 and 100.")
    return output_path.resolve(), pil_format


_WINDOW_OPTIONS = ('x_center', 'y_center', 'x_width', 'y_width')


def resolve_settings(opt, parser):
    window = [getattr(opt, name) for name in _WINDOW_OPTIONS]
    if any(value is not None for value in window):
        if any(value is None for value in window):
            parser.error("--x-center, --y-center, --x-width and --y-width must be given together.")
        return RenderSettings.centered(
            *window,
            opt.width,
            opt.height,
            color_speed=opt.speed,
            max_iterations=opt.max_iterations,
        )
    return RenderSettings(
        plane_min_x=opt.x_min,
        plane_max_x=opt.x_max,
        plane_min_y=opt.y_min,
        plane_max_y=opt.y_max,
        pixel_width=opt.width,
        pixel_height=opt.height,
        color_speed=opt.speed,
        max_iterations=opt.max_iterations,
    )


def to_image(buffer, pil_format):
    """Wrap a rendered buffer in a Pillow image suitable for ``pil_format``."""

    image = PIL.Image.fromarray(buffer.pixels)
    if pil_format in {"JPEG", "BMP", "PPM"}:
        image = image.convert("RGB")
    return image


def write_image(image, output_path, pil_format, quality):
    output_path.parent.mkdir(parents=True, exist_ok=True)
    options = {"quality": quality} if pil_format == "JPEG" else {}
    image.save(str(output_path), format=pil_format, **options)


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = VERBOSE or bool(opt.verbose)

    log("TensorFlow version: %s" % tf.__version__)

    output_path, pil_format = resolve_output(opt, parser)
    settings = resolve_settings(opt, parser)

    device = pick_device() if opt.backend == 'tensorflow' else None
    log("Rendering {0}x{1} with the {2} backend".format(opt.width, opt.height, opt.backend))

    start = time.perf_counter()
    try:
        buffer = render(settings, workers=opt.workers, backend=opt.backend, device=device)
    except ConfigurationError as exc:
        parser.error(str(exc))

    write_image(to_image(buffer, pil_format), output_path, pil_format, opt.quality)
    log("Wrote %s" % output_path)

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    print("Total time elapsed : {0} ms".format(elapsed_ms))
    return output_path


if __name__ == '__main__':
    main()
