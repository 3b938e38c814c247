"""
richedit Serializer -- Media and Inline SVG Tests

Media elements keep their sources in a `src` list; serialization turns one
source into a src attribute and several into <source> children.

Images whose src is an inline SVG data URI are written back as the inline
<svg> markup, carrying the image's style.
"""

from richedit.kernel.serializer import serialize
from richedit.kernel.types import ElementNode, TextNode

SVG = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10"><rect fill="%23ff0000" width="10" height="10"/></svg>'
SVG_URI = "data:image/svg+xml;utf8," + SVG


class TestMediaSources:
    def test_single_source_becomes_attribute(self):
        node = ElementNode(name="video", attrs={"controls": True}, src=["a.mp4"])
        assert serialize([node]) == '<video controls src="a.mp4"></video>'

    def test_multiple_sources_become_children(self):
        node = ElementNode(name="video", attrs={"controls": True, "src": "old.mp4"}, src=["a.mp4", "b.mp4"])
        assert serialize([node]) == (
            '<video controls><source src="a.mp4"><source src="b.mp4"></video>'
        )

    def test_audio(self):
        node = ElementNode(name="audio", attrs={"controls": "T", "name": "Song"}, src=["a.mp3"])
        assert serialize([node]) == '<audio controls name="Song" src="a.mp3"></audio>'

    def test_empty_source_list(self):
        node = ElementNode(name="video", attrs={"controls": True}, src=[])
        assert serialize([node]) == "<video controls></video>"

    def test_tree_not_mutated(self):
        node = ElementNode(name="video", attrs={"controls": True}, src=["a.mp4", "b.mp4"])
        serialize([node])
        assert node.src == ["a.mp4", "b.mp4"]
        assert node.children is None
        assert node.attrs == {"controls": True}

    def test_inside_wrapper(self):
        wrapper = ElementNode(
            name="div",
            attrs={"style": "text-align:center"},
            children=[ElementNode(name="audio", attrs={"controls": True}, src=["a.mp3"])],
        )
        assert serialize([wrapper]) == (
            '<div style="text-align:center"><audio controls src="a.mp3"></audio></div>'
        )


class TestInlineSvg:
    def test_restored_with_style(self):
        node = ElementNode(name="img", attrs={"src": SVG_URI, "style": "width:20px"})
        assert serialize([node]) == (
            '<svg style="width:20px" xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10">'
            '<rect fill="#ff0000" width="10" height="10"/></svg>'
        )

    def test_restored_without_style(self):
        node = ElementNode(name="img", attrs={"src": SVG_URI})
        assert serialize([node]) == SVG.replace("%23", "#")

    def test_style_merged_into_existing(self):
        uri = 'data:image/svg+xml;utf8,<svg style="color:red"><circle r="1"/></svg>'
        node = ElementNode(name="img", attrs={"src": uri, "style": "width:20px"})
        assert serialize([node]) == '<svg style="width:20px;color:red"><circle r="1"/></svg>'

    def test_siblings_continue(self):
        nodes = [
            TextNode(text="before"),
            ElementNode(name="img", attrs={"src": SVG_URI}),
            TextNode(text="after"),
        ]
        html = serialize(nodes)
        assert html.startswith("before<svg")
        assert html.endswith("</svg>after")

    def test_regular_image_untouched(self):
        node = ElementNode(name="img", attrs={"src": "data:image/png;base64,AAAA"})
        assert serialize([node]) == '<img src="data:image/png;base64,AAAA">'
