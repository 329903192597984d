import pytest

from defplace.die_plot import (
    ChipDesign,
    Component,
    SpecialNet,
    escape_subscript,
    find_output_name,
    main,
    parse_def,
    render_gnuplot,
)

SAMPLE = [
    "VERSION 5.8 ;",
    "DIEAREA ( 0 0 ) ( 82970 80070 ) ;",
    "COMPONENTS 2 ;",
    "- inv_1 INV",
    "  + PLACED ( 100 200 ) N ;",
    "- nand2 NAND",
    "  + PLACED ( 5000 6000 ) FS ;",
    "END COMPONENTS",
    "SPECIALNETS 2 ;",
    "- VDD ( * VDD )",
    "  + ROUTED Metal4 440 ( 1000 0 ) ( * 80070 ) ;",
    "- VSS ( * VSS )",
    "  + ROUTED Metal1 200 ( 0 3000 ) ( 82970 * ) ;",
    "END SPECIALNETS",
]


def test_escape_subscript_doubles_backslashes_before_underscore():
    assert escape_subscript("a_b") == "a\\\\_b"
    assert escape_subscript("plain") == "plain"


def test_find_output_name_uses_case_tag():
    assert find_output_name("cases/CS7100x6600.txt") == "CS7100x6600.png"
    assert find_output_name("input.txt") == "output.png"


def test_add_component_uses_fixed_size():
    chip = ChipDesign(10, 20)
    chip.add_component("c", 3, 4)
    assert chip.components == [Component("c", 3, 4, 3 + 10, 4 + 20)]


def test_parse_die_area():
    chip = parse_def(SAMPLE, 7100, 6600)
    assert (chip.die.x1, chip.die.y1, chip.die.x2, chip.die.y2) == (0, 0, 82970, 80070)


def test_parse_components():
    chip = parse_def(SAMPLE, 7100, 6600)
    assert [c.name for c in chip.components] == [escape_subscript("inv_1"), "nand2"]
    first = chip.components[0]
    assert (first.x1, first.y1) == (100, 200)
    assert first.x2 - first.x1 == 7100
    assert first.y2 - first.y1 == 6600


def test_parse_vertical_net_widens_x():
    chip = parse_def(SAMPLE, 7100, 6600)
    vdd = chip.special_nets[0]
    assert vdd == SpecialNet("VDD", 1000 - 220, 0, 1000 + 220, 80070)


def test_parse_horizontal_net_widens_y():
    chip = parse_def(SAMPLE, 7100, 6600)
    vss = chip.special_nets[1]
    assert vss == SpecialNet("VSS", 0, 3000 - 100, 82970, 3000 + 100)


def test_parse_missing_placement_line():
    with pytest.raises(ValueError):
        parse_def(["- lonely"], 1, 1)


def test_parse_bad_die_area():
    with pytest.raises(ValueError):
        parse_def(["DIEAREA ( 0 0 ) ( x y ) ;"], 1, 1)


def test_render_object_indices_and_tail():
    chip = parse_def(SAMPLE, 7100, 6600)
    script = render_gnuplot(chip, "CS7100x6600.png")
    lines = script.split("\n")
    assert lines[0] == "reset"
    assert lines[-1] == "replot"
    assert 'set output "CS7100x6600.png"' in lines
    objects = [line for line in lines if line.startswith("set object")]
    assert [line.split()[2] for line in objects] == ["1", "2", "3", "4"]
    assert "plot [0:82970][0:80070] 0 with lines" in lines


def test_render_component_rectangle():
    chip = ChipDesign(10, 20)
    chip.add_component("c", 0, 0)
    script = render_gnuplot(chip, "out.png")
    assert 'set object 1 rect from 0,0 to 10,20 lw 1 fs solid fc rgb "#00CACA"' in script
    assert 'set label "{c}" at 5,10 center font ",8"' in script


def test_render_metal3_named_net_is_rotated_at_die_top():
    chip = ChipDesign(1, 1)
    chip.set_die_area(100, 90)
    chip.add_special_net("Metal3_strap", 0, 0, 10, 90)
    chip.add_special_net("VDD", 0, 0, 10, 90)
    script = render_gnuplot(chip, "out.png")
    assert '#c38b13' in script
    assert "at 5,90 rotate by 270" in script
    assert '#1AFD9C' in script


def test_main_writes_script(tmp_path):
    source = tmp_path / "CS7100x6600.txt"
    source.write_text("\n".join(SAMPLE) + "\n", encoding="utf-8")
    target = tmp_path / "out.gp"
    assert main(["7100", "6600", str(source), str(target)]) == 0
    expected = render_gnuplot(parse_def(SAMPLE, 7100, 6600), "CS7100x6600.png")
    assert target.read_text(encoding="utf-8") == expected


def test_main_missing_input_fails(tmp_path):
    assert main(["1", "1", str(tmp_path / "absent.txt"), str(tmp_path / "o.gp")]) == 1
    assert not (tmp_path / "o.gp").exists()