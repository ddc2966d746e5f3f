import pytest

from urlsmith.analyzer import analyze_image_url
from urlsmith.models import CdnType, ManipulationCapabilities, ManipulationStrategy
from urlsmith.rewriter import generate_responsive_urls, generate_url, parse_sizes


CLOUDINARY_URL = "https://res.cloudinary.com/demo/image/upload/sample.jpg"


@pytest.mark.parametrize(
    "url",
    [
        CLOUDINARY_URL,
        "https://example.com/image.jpg?w=800&h=600",
        "https://example.com/800x600/image.jpg",
        "https://example.imgix.net/image.jpg",
        "https://example.com/plain.jpg",
    ],
)
def test_no_requested_dimensions_returns_input(url):
    assert generate_url(analyze_image_url(url), url) == url


def test_strategy_none_returns_input():
    url = "https://example.com/plain.jpg?w=abc"
    caps = ManipulationCapabilities()
    assert generate_url(caps, url, width=100, height=100, quality=50) == url


def test_query_parameters_replaced_and_others_preserved():
    url = "https://example.com/image.jpg?width=800&token=a%2Fb&height=600"
    caps = analyze_image_url(url)
    assert generate_url(caps, url, width=400) == "https://example.com/image.jpg?width=400&token=a%2Fb&height=600"
    resized = generate_url(caps, url, width=200, height=150)
    assert "width=200" in resized
    assert "height=150" in resized


def test_query_parameters_unsupported_axis_dropped():
    url = "https://example.com/image.jpg?w=800"
    caps = analyze_image_url(url)
    assert generate_url(caps, url, height=300) == url


def test_query_quality_clamped_to_defaults():
    url = "https://example.com/image.jpg?q=80"
    caps = analyze_image_url(url)
    assert generate_url(caps, url, quality=500) == "https://example.com/image.jpg?q=100"
    assert generate_url(caps, url, quality=-3) == "https://example.com/image.jpg?q=1"


def test_width_clamped_to_max():
    caps = ManipulationCapabilities(
        strategy=ManipulationStrategy.QUERY_PARAMETERS,
        can_adjust_width=True,
        width_param_name="w",
        max_width=5000,
    )
    url = generate_url(caps, "https://example.com/a.jpg", width=999999)
    assert url == "https://example.com/a.jpg?w=5000"
    assert "999999" not in url


def test_cloudinary_width_clamped_to_max():
    url = generate_url(analyze_image_url(CLOUDINARY_URL), CLOUDINARY_URL, width=999999)
    assert "w_5000" in url
    assert "999999" not in url


def test_path_segments_width_by_height():
    url = "https://example.com/800x600/image.jpg"
    caps = analyze_image_url(url)
    assert generate_url(caps, url, width=400, height=300) == "https://example.com/400x300/image.jpg"
    assert generate_url(caps, url, width=400) == "https://example.com/400x600/image.jpg"


def test_path_segments_width_only_drops_height():
    url = "https://example.com/w800/image.jpg"
    caps = analyze_image_url(url)
    assert generate_url(caps, url, width=200, height=100) == "https://example.com/w200/image.jpg"
    assert generate_url(caps, url, height=100) == url


def test_path_segments_size_prefix_and_suffix():
    url = "https://example.com/size-800x600/image.jpg"
    assert generate_url(analyze_image_url(url), url, width=10, height=20) == "https://example.com/size-10x20/image.jpg"

    url = "https://example.com/media/photo-640x480.webp"
    assert generate_url(analyze_image_url(url), url, width=320, height=240) == "https://example.com/media/photo-320x240.webp"


def test_path_segments_missing_segment_returns_input():
    caps = analyze_image_url("https://example.com/800x600/image.jpg")
    other = "https://example.com/photos/image.jpg"
    assert generate_url(caps, other, width=100) == other


def test_cloudinary_inserts_transformation_after_upload():
    url = generate_url(analyze_image_url(CLOUDINARY_URL), CLOUDINARY_URL, width=320, height=200, quality=80)
    assert url == "https://res.cloudinary.com/demo/image/upload/c_fill,w_320,h_200,q_80/sample.jpg"


def test_cloudinary_merges_into_existing_transformation():
    source = "https://res.cloudinary.com/demo/image/upload/w_300,h_200,c_crop/sample.jpg"
    url = generate_url(analyze_image_url(source), source, width=640)
    assert url == "https://res.cloudinary.com/demo/image/upload/w_640,h_200,c_crop/sample.jpg"


def test_cloudinary_quality_only_keeps_existing_crop():
    source = "https://res.cloudinary.com/demo/image/upload/w_300,h_200,c_crop/sample.jpg"
    url = generate_url(analyze_image_url(source), source, quality=50)
    assert url == "https://res.cloudinary.com/demo/image/upload/w_300,h_200,c_crop,q_50/sample.jpg"


def test_cloudinary_adds_fill_crop_when_none_set():
    source = "https://res.cloudinary.com/demo/image/upload/e_sepia/sample.jpg"
    url = generate_url(analyze_image_url(source), source, width=640)
    assert url == "https://res.cloudinary.com/demo/image/upload/e_sepia,c_fill,w_640/sample.jpg"


def test_cloudinary_without_anchor_returns_input():
    source = "https://res.cloudinary.com/demo/image/fetch/sample.jpg"
    assert generate_url(analyze_image_url(source), source, width=640) == source


def test_imgix_sets_params_and_auto_format():
    source = "https://example.imgix.net/image.jpg?fit=crop&w=100"
    url = generate_url(analyze_image_url(source), source, width=400, quality=75)
    assert url == "https://example.imgix.net/image.jpg?fit=crop&w=400&q=75&auto=format"


def test_wordpress_replaces_suffix_when_both_dimensions_given():
    source = "https://example.com/wp-content/uploads/2023/01/image-300x200.jpg"
    caps = analyze_image_url(source)
    assert generate_url(caps, source, width=600, height=400) == (
        "https://example.com/wp-content/uploads/2023/01/image-600x400.jpg"
    )
    assert generate_url(caps, source, width=600) == source + "?w=600"


def test_cdn_without_builder_returns_input():
    caps = ManipulationCapabilities(
        strategy=ManipulationStrategy.CDN_SPECIFIC,
        cdn_type=CdnType.FASTLY,
        can_adjust_width=True,
    )
    url = "https://images.fastly.net/a.jpg"
    assert generate_url(caps, url, width=100) == url


def test_descriptor_survives_serialization():
    caps = analyze_image_url(CLOUDINARY_URL)
    data = caps.to_dict()
    assert data["strategy"] == "cdnSpecific"
    assert data["cdnType"] == "cloudinary"
    assert ManipulationCapabilities.from_dict(data) == caps


def test_from_dict_unknown_variant_falls_back_to_none():
    caps = ManipulationCapabilities.from_dict({"strategy": "teleport", "cdnType": "nowhere"})
    assert caps.strategy is ManipulationStrategy.NONE
    assert caps.cdn_type is CdnType.NONE


def test_generate_responsive_urls():
    urls = generate_responsive_urls(
        analyze_image_url(CLOUDINARY_URL),
        CLOUDINARY_URL,
        sizes=[{"width": 320}, {"width": 640}, {"width": 1024}, {"width": 320}],
    )
    assert len(urls) == 3
    assert "w_320" in urls[0]
    assert "w_640" in urls[1]
    assert "w_1024" in urls[2]


def test_generate_responsive_urls_without_resizing_returns_base():
    url = "https://example.com/plain.jpg"
    assert generate_responsive_urls(analyze_image_url(url), url) == [url]


def test_parse_sizes():
    assert parse_sizes("320, 800x600,h200") == [{"width": 320}, {"width": 800, "height": 600}, {"height": 200}]


def test_repeated_query_key_updated_everywhere():
    url = "https://example.com/image.jpg?w=abc&w=100&x=1"
    caps = analyze_image_url(url)
    assert caps.width_param_name == "w"
    assert generate_url(caps, url, width=50) == "https://example.com/image.jpg?w=50&w=50&x=1"


def test_path_rewrite_ignores_oversized_digit_runs():
    url = f"https://example.com/w{'9' * 5000}/a.jpg"
    caps = ManipulationCapabilities(
        strategy=ManipulationStrategy.PATH_SEGMENTS,
        can_adjust_width=True,
        can_adjust_height=True,
    )
    assert generate_url(caps, url, width=100) == url
    assert generate_url(analyze_image_url(url), url, width=100) == url
