"""Rule knowledge base: remediation guidance keyed by rule or WCAG criterion.

Lookups resolve in two tiers. A rule identifier with its own entry is
returned directly; otherwise the rule's mapped success criteria are tried
in table order. Anything left unresolved gets generic guidance naming the
rule, so callers always have something to display.
"""

from types import MappingProxyType

from ..models import WCAGInfo

CRITERION_PREFIX = "WCAG"

RULE_TO_WCAG = MappingProxyType({
    "landmark-no-duplicate-banner": ("WCAG1.3.1", "WCAG4.1.1"),
    "landmark-no-duplicate-contentinfo": ("WCAG1.3.1", "WCAG4.1.1"),
    "landmark-banner-is-top-level": ("WCAG1.3.1",),
    "landmark-contentinfo-is-top-level": ("WCAG1.3.1",),
    "landmark-complementary-is-top-level": ("WCAG1.3.1",),
    "landmark-unique": ("WCAG1.3.1", "WCAG4.1.1"),
    "landmark-no-duplicate-main": ("WCAG1.3.1", "WCAG4.1.1"),
    "button-name": ("WCAG4.1.2", "WCAG2.5.3"),
    "image-alt": ("WCAG1.1.1",),
    "image-redundant-alt": ("WCAG1.1.1",),
    "link-name": ("WCAG2.4.4", "WCAG4.1.2"),
    "color-contrast": ("WCAG1.4.3",),
    "region": ("WCAG1.3.1",),
    "list": ("WCAG1.3.1",),
    "listitem": ("WCAG1.3.1",),
    "heading-order": ("WCAG1.3.1", "WCAG2.4.6"),
    "label": ("WCAG1.3.1", "WCAG4.1.2"),
    "label-title-only": ("WCAG1.3.1", "WCAG4.1.2"),
    "frame-title": ("WCAG4.1.2",),
    "html-has-lang": ("WCAG3.1.1",),
    "document-title": ("WCAG2.4.2",),
    "object-alt": ("WCAG1.1.1",),
    "duplicate-id": ("WCAG4.1.1",),
    "duplicate-id-aria": ("WCAG4.1.1",),
})

WCAG_DATABASE = MappingProxyType({
    "image-redundant-alt": WCAGInfo(
        description="Alternative text should not be repeated as visible text to avoid redundancy for screen reader users.",
        success_criteria="Ensure that image alternative text does not duplicate adjacent or contained text content.",
        suggested_fix="Remove redundant alternative text when the image's meaning is already conveyed by nearby text content.",
        code_example="""<!-- Bad Example -->
<img src="phone.png" alt="Contact us at 555-0123">
<p>Contact us at 555-0123</p>

<!-- Good Example -->
<img src="phone.png" alt="Phone icon">
<p>Contact us at 555-0123</p>

<!-- Or, if the image is decorative -->
<img src="phone.png" alt="" role="presentation">
<p>Contact us at 555-0123</p>""",
    ),
    "link-name": WCAGInfo(
        description="Links must have discernible text that clearly indicates their purpose.",
        success_criteria="Ensure that the purpose of each link can be determined from the link text alone or from the link text together with its programmatically determined context.",
        suggested_fix='Provide descriptive text for links that clearly indicates their purpose. Avoid generic phrases like "click here" or "learn more" without context.',
        code_example="""<!-- Bad Examples -->
<a href="doc.pdf">click here</a>
<a href="help.html">read more</a>
<a href="profile.html"><img src="user.png"></a>

<!-- Good Examples -->
<a href="doc.pdf">Download Annual Report (PDF)</a>
<a href="help.html">Learn more about accessibility features</a>
<a href="profile.html">
  <img src="user.png" alt="View user profile">
</a>""",
    ),
    "landmark-no-duplicate-main": WCAGInfo(
        description="A page must not have more than one main landmark. The main landmark represents the primary content of the page.",
        success_criteria="Ensure there is exactly one main landmark per page to clearly identify the primary content area.",
        suggested_fix="Keep only one main landmark and use other appropriate landmarks or elements for additional content sections.",
        code_example="""<!-- Good Example -->
<header role="banner">
  <!-- Header content -->
</header>
<main role="main">
  <!-- Primary content -->
</main>
<footer role="contentinfo">
  <!-- Footer content -->
</footer>

<!-- Bad Example -->
<main role="main">
  <!-- First main content -->
</main>
<main role="main">
  <!-- Second main content - This is incorrect -->
</main>""",
    ),
    "duplicate-id-aria": WCAGInfo(
        description="IDs used in ARIA and labels must be unique to prevent confusion for assistive technologies.",
        success_criteria="Ensure that all id attributes are unique within the document to maintain proper relationships between labels and their controls.",
        suggested_fix="Generate unique IDs for all elements that require them. If using dynamic content, ensure IDs are unique across the entire document.",
        code_example="""<!-- Bad Example -->
<label id="name">First Name</label>
<input id="name" type="text">
<label id="name">Last Name</label>
<input id="name" type="text">

<!-- Good Example -->
<label id="first-name">First Name</label>
<input id="first-name-input" type="text">
<label id="last-name">Last Name</label>
<input id="last-name-input" type="text">""",
    ),
    "heading-order": WCAGInfo(
        description="Headings must follow a logical hierarchical order to maintain proper document structure.",
        success_criteria="Ensure heading levels are properly nested and do not skip levels.",
        suggested_fix="Structure headings in a logical order, starting with h1 and nesting subsequent levels appropriately.",
        code_example="""<!-- Good Example -->
<h1>Main Title</h1>
<section>
  <h2>Section Title</h2>
  <h3>Subsection Title</h3>
</section>

<!-- Bad Example -->
<h1>Main Title</h1>
<h3>Skipped h2 Level</h3>""",
    ),
    "html-has-lang": WCAGInfo(
        description="The HTML element must have a valid lang attribute to identify the language of the page.",
        success_criteria="Specify the primary language of the page using a valid language code.",
        suggested_fix="Add a lang attribute with the appropriate language code to the HTML element.",
        code_example="""<!-- Good Example -->
<!DOCTYPE html>
<html lang="en">
  <head>...</head>
  <body>...</body>
</html>

<!-- Bad Example -->
<!DOCTYPE html>
<html>
  <head>...</head>
  <body>...</body>
</html>""",
    ),
    "document-title": WCAGInfo(
        description="The document must have a title that describes its topic or purpose.",
        success_criteria="Provide a descriptive title that identifies the page content.",
        suggested_fix="Add a meaningful title element that clearly describes the page content.",
        code_example="""<!-- Good Example -->
<!DOCTYPE html>
<html lang="en">
  <head>
    <title>Product Search Results - Online Store</title>
  </head>
</html>

<!-- Bad Example -->
<!DOCTYPE html>
<html lang="en">
  <head>
    <title>Page Title</title>
  </head>
</html>""",
    ),
    "image-alt": WCAGInfo(
        description="Images must have alternative text that describes their content or purpose.",
        success_criteria="Provide text alternatives for images that convey their meaning or function.",
        suggested_fix='Add descriptive alt text to images. Use empty alt="" for decorative images.',
        code_example="""<!-- Good Examples -->
<img src="logo.png" alt="Company Logo">
<img src="chart.png" alt="Sales growth chart showing 25% increase">
<img src="decoration.png" alt="" role="presentation">

<!-- Bad Examples -->
<img src="logo.png">
<img src="chart.png" alt="chart">""",
    ),
    "button-name": WCAGInfo(
        description="Buttons must have discernible text that describes their purpose.",
        success_criteria="Ensure buttons have clear, descriptive labels that indicate their function.",
        suggested_fix="Add text content or aria-label to buttons that clearly describes their purpose.",
        code_example="""<!-- Good Examples -->
<button>Submit Form</button>
<button aria-label="Close dialog">
  <svg><!-- icon --></svg>
</button>

<!-- Bad Examples -->
<button></button>
<button><svg></svg></button>""",
    ),
    "frame-title": WCAGInfo(
        description="Frames and iframes must have titles that describe their content.",
        success_criteria="Provide descriptive titles for frames to identify their purpose.",
        suggested_fix="Add title attributes to frames that clearly describe their content.",
        code_example="""<!-- Good Example -->
<iframe
  title="Product Demo Video"
  src="video.html"
></iframe>

<!-- Bad Example -->
<iframe src="video.html"></iframe>""",
    ),
    "list": WCAGInfo(
        description="List markup must be used correctly to maintain proper structure.",
        success_criteria="Use appropriate list elements (ul, ol, dl) to group related items.",
        suggested_fix="Structure related items using proper list elements and ensure correct nesting.",
        code_example="""<!-- Good Example -->
<ul>
  <li>First item</li>
  <li>Second item</li>
</ul>

<!-- Bad Example -->
<div>
  • First item<br>
  • Second item
</div>""",
    ),
    "listitem": WCAGInfo(
        description="List items must be contained within appropriate parent elements.",
        success_criteria="Ensure list items are properly nested within list containers.",
        suggested_fix="Place list items (li) only within appropriate list elements (ul, ol).",
        code_example="""<!-- Good Example -->
<ul>
  <li>List item</li>
</ul>

<!-- Bad Example -->
<div>
  <li>Orphaned list item</li>
</div>""",
    ),
    "region": WCAGInfo(
        description="All content should be contained within landmarks to aid navigation.",
        success_criteria="Use ARIA landmarks or HTML5 sectioning elements to identify page regions.",
        suggested_fix="Structure content using appropriate landmark roles or semantic HTML elements.",
        code_example="""<!-- Good Example -->
<header role="banner">
  <nav role="navigation">...</nav>
</header>
<main role="main">...</main>
<footer role="contentinfo">...</footer>

<!-- Bad Example -->
<div>
  <!-- Unmarked content sections -->
</div>""",
    ),
    "WCAG1.1.1": WCAGInfo(
        description="All non-text content must have a text alternative that serves the equivalent purpose.",
        success_criteria="Provide text alternatives for any non-text content.",
        suggested_fix="Add appropriate text alternatives to images, media, and other non-text content.",
        code_example="""<!-- Good Examples -->
<img src="chart.png" alt="Q4 sales increased by 25% compared to Q3">
<object data="graph.svg">Annual growth trend showing steady increase</object>""",
    ),
    "WCAG1.3.1": WCAGInfo(
        description="Information and relationships conveyed through presentation can be programmatically determined.",
        success_criteria="Use semantic markup to convey structure and relationships.",
        suggested_fix="Structure content using appropriate HTML elements and ARIA attributes.",
        code_example="""<!-- Good Example -->
<article>
  <h1>Main Title</h1>
  <section>
    <h2>Section Title</h2>
    <p>Content...</p>
  </section>
</article>""",
    ),
    # color-contrast resolves here through RULE_TO_WCAG
    "WCAG1.4.3": WCAGInfo(
        description="Text content must have sufficient contrast against its background to ensure readability.",
        success_criteria="Ensure text has a contrast ratio of at least 4.5:1 for normal text and 3:1 for large text.",
        suggested_fix="Adjust text or background colors to meet minimum contrast requirements. Use tools to verify contrast ratios.",
        code_example="""<!-- Good Example -->
<div style="background-color: #FFFFFF;">
  <p style="color: #595959;">This text has good contrast</p>
</div>

<!-- Bad Example -->
<div style="background-color: #FFFFFF;">
  <p style="color: #CCCCCC;">This text has poor contrast</p>
</div>""",
    ),
    "WCAG2.4.2": WCAGInfo(
        description="Web pages must have titles that describe topic or purpose.",
        success_criteria="Provide clear, descriptive page titles.",
        suggested_fix="Add meaningful titles that accurately describe page content.",
        code_example='<title>Search Results for "Accessibility Tools" - Website Name</title>',
    ),
    "WCAG2.4.4": WCAGInfo(
        description="Link purpose can be determined from link text alone.",
        success_criteria="Ensure link text clearly indicates its destination or purpose.",
        suggested_fix="Use descriptive link text that makes sense out of context.",
        code_example="""<!-- Good Example -->
<a href="policy.pdf">Read our privacy policy (PDF)</a>""",
    ),
    "WCAG2.4.6": WCAGInfo(
        description="Headings and labels describe topic or purpose.",
        success_criteria="Use clear, descriptive headings and labels.",
        suggested_fix="Write headings that accurately describe their sections.",
        code_example="""<h1>Product Features</h1>
<h2>Technical Specifications</h2>""",
    ),
    "WCAG2.5.3": WCAGInfo(
        description="Label in name matches visible text.",
        success_criteria="Ensure visible labels match their accessible names.",
        suggested_fix="Make sure visible text is included in accessible names.",
        code_example='<button aria-label="Submit form">Submit</button>',
    ),
    "WCAG3.1.1": WCAGInfo(
        description="Language of page is specified.",
        success_criteria="Specify the default human language of the page.",
        suggested_fix="Add a lang attribute to the html element.",
        code_example='<html lang="en">',
    ),
    "WCAG4.1.1": WCAGInfo(
        description="Elements have complete start and end tags, are nested properly, and have unique IDs.",
        success_criteria="Ensure proper HTML structure and unique identification.",
        suggested_fix="Use valid HTML markup and maintain unique IDs.",
        code_example="""<!-- Good Example -->
<div id="unique-1">
  <p>Properly structured content</p>
</div>""",
    ),
    "WCAG4.1.2": WCAGInfo(
        description="Name, role, and value can be programmatically determined.",
        success_criteria="Ensure interface components are properly identified.",
        suggested_fix="Use appropriate ARIA attributes and semantic HTML.",
        code_example="""<button aria-expanded="false" aria-controls="menu">
  Toggle Menu
</button>""",
    ),
})


def criteria_for_rule(rule_id: str) -> tuple[str, ...]:
    """WCAG criteria mapped to a rule, in table order."""
    return RULE_TO_WCAG.get(rule_id, ())


def criterion_number(criterion: str) -> str:
    """Strip the 'WCAG' prefix: 'WCAG1.4.3' -> '1.4.3'."""
    if criterion.startswith(CRITERION_PREFIX):
        return criterion[len(CRITERION_PREFIX):]
    return criterion


def generic_info(rule_id: str) -> WCAGInfo:
    return WCAGInfo(
        description=f"Accessibility rule '{rule_id}' requires attention to ensure content is accessible to all users.",
        success_criteria=f"Follow WCAG guidelines for {rule_id} to ensure compliance.",
        suggested_fix=f"Review the specific requirements for {rule_id} and implement appropriate accessibility fixes.",
    )


def lookup(rule_id: str | None) -> WCAGInfo:
    """Resolve remediation guidance for a rule or criterion identifier.

    Args:
        rule_id: Engine rule identifier (e.g. 'image-alt') or criterion
            key (e.g. 'WCAG1.4.3')

    Returns:
        The direct entry, the first mapped criterion with an entry, or
        generic guidance, also when no identifier was given.
    """
    if not rule_id:
        return generic_info("")

    info = WCAG_DATABASE.get(rule_id)
    if info is not None:
        return info

    for criterion in criteria_for_rule(rule_id):
        info = WCAG_DATABASE.get(criterion)
        if info is not None:
            return info

    return generic_info(rule_id)
