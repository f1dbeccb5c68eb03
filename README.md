# cubcaster

A small first-person raycaster. It reads a `.cub` scene description, loads
four XPM wall textures and lets you walk through the maze in a 720×480
window drawn with pygame.

## Installing

```
pip install .
```

## Running

```
cubcaster path/to/map.cub
```

The command takes exactly one argument, the path to a file whose name ends
in `.cub`. Any problem with the arguments, the scene file or a texture is
reported as a line `Error` followed by a description, and the command exits
with status 1.

### Controls

| Key            | Action          |
|----------------|-----------------|
| W / S          | forward / back  |
| A / D          | strafe          |
| Left / Right   | turn            |
| Esc            | quit            |

Closing the window also quits. Movement is blocked by walls.

## The `.cub` format

The file starts with six settings, one per line, in any order; blank lines
between them are ignored:

```
NO ./textures/north.xpm
SO ./textures/south.xpm
WE ./textures/west.xpm
EA ./textures/east.xpm

F 220,100,0
C 225,30,0
```

`NO`, `SO`, `WE` and `EA` name the XPM textures for each wall face; each
must be a readable XPM file and each may be given only once. `F` and `C`
give the floor and ceiling colours as three comma-separated values from 0
to 255. All four textures and both colours must be present before the map
begins.

After the settings comes the map, made of these characters:

- `1` a wall
- `0` open floor
- a space: outside the map
- `N`, `S`, `E` or `W`: the starting position and the direction you face

There must be exactly one starting position, the map may not contain blank
lines, and it must be closed: no open cell may touch the edge of the map or
a space without a wall in between. Shorter rows are padded with spaces.

Example:

```
111111
100101
101001
1100N1
111111
```

### Textures

XPM colours may be written as `#RRGGBB` or as X11 colour names (matched
without regard to case); `None` marks a transparent pixel. Texture heights
should be powers of two, since texture rows are chosen by masking with
`height - 1`.

## Using it as a library

- `cubcaster.parse.parse_file(path, texture_check=None)` reads a `.cub` file
  into a `MapConfig`, raising `ParseError` on bad input;
  `parse_lines(lines, texture_check=None)` does the same for lines already in
  memory. `texture_check` is a callable deciding whether a texture path is
  usable; by default the path must load as an XPM image.
- `cubcaster.parse.check_file_extension(name)` raises `ParseError` unless the
  name ends in `.cub`; `check_closed(grid)` raises unless a grid is closed.
- `cubcaster.xpm.load_xpm(path)` and `parse_xpm_text(text)` decode an XPM
  image into an `XpmImage` (`width`, `height`, `pixel(x, y)`), raising
  `XpmError` when they cannot.
- `cubcaster.xcolors.lookup_color(name)` returns the 0xRRGGBB value of an X11
  colour name, or `None`.
- `cubcaster.raycast.cast_ray(...)` casts one screen column's ray through a
  grid; `render_frame(buffer, config, camera, position, textures, keys)` draws
  one frame into a `FrameBuffer` and returns the player's new position.
- `cubcaster.app.Game` ties these together: `key_press`, `key_release` and
  `tick()`, which renders a frame and returns the frame buffer.

## What it does not do

There is no mouse look, no sound, no minimap, no sprites or doors, and no
image formats other than XPM for textures.

## Tests

```
pip install .[test]
pytest
```